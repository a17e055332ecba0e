# crisis models — wellness metrics in, signals and assessment out
# signals and assessments are immutable once built

from datetime import datetime, timezone
from typing import Any, Optional, Literal
from pydantic import BaseModel, Field

SignalType = Literal["mood", "behavioral", "social", "physical", "verbal"]
Severity = Literal["low", "medium", "high", "critical"]
RiskLevel = Literal["low", "medium", "high", "critical"]


class WellnessMetrics(BaseModel):
    """structured check-in data fed to the crisis detector.
    numeric fields are optional here, a missing field contributes no signal."""
    mood: Optional[int] = Field(None, ge=1, le=5)
    energy: Optional[int] = Field(None, ge=1, le=10)
    stress: Optional[int] = Field(None, ge=1, le=10)
    sleep: Optional[int] = Field(None, ge=1, le=10)
    notes: str = ""
    activities: list[str] = Field(default_factory=list)
    emotions: list[str] = Field(default_factory=list)


class HistoryRecord(BaseModel):
    """a past mood log as seen by the behavioral and social checks (most recent first)"""
    mood: Optional[int] = None
    activities: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True}


class CrisisSignal(BaseModel):
    """a single detected risk indicator"""
    id: str
    signal_type: SignalType = Field(..., alias="signalType")
    severity: Severity
    description: str
    detected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="detectedAt")
    intervention_required: bool = Field(True, alias="interventionRequired")
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True, "frozen": True}


class CrisisAssessment(BaseModel):
    """aggregate of all signals for one check-in"""
    overall_risk: RiskLevel = Field(..., alias="overallRisk")
    signals: list[CrisisSignal] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    immediate_actions: list[str] = Field(default_factory=list, alias="immediateActions")
    follow_up_required: bool = Field(False, alias="followUpRequired")
    psychologist_notification: bool = Field(False, alias="psychologistNotification")
    emergency_contact: bool = Field(False, alias="emergencyContact")
    assessment_score: int = Field(0, alias="assessmentScore")
    confidence: int = Field(0, ge=0, le=100)

    model_config = {"populate_by_name": True, "frozen": True}


# request / response bodies for the crisis router

class CrisisAssessRequest(BaseModel):
    """check-in payload, the four numeric fields are mandatory at the api edge"""
    mood: int = Field(..., ge=1, le=5)
    energy: int = Field(..., ge=1, le=10)
    stress: int = Field(..., ge=1, le=10)
    sleep: int = Field(..., ge=1, le=10)
    notes: str = Field("", max_length=2000)
    activities: list[str] = Field(default_factory=list)
    emotions: list[str] = Field(default_factory=list)


class CrisisAssessResponse(BaseModel):
    """result of a check-in assessment"""
    assessment_id: str = Field(..., alias="assessmentId")
    assessment: CrisisAssessment
    alert_sent: bool = Field(False, alias="alertSent")

    model_config = {"populate_by_name": True}


class CrisisAssessmentRecord(BaseModel):
    """a persisted assessment from the crisis_assessments collection"""
    id: str
    user_id: str = Field(..., alias="userId")
    assessment: CrisisAssessment
    created_at: str = Field("", alias="createdAt")

    model_config = {"populate_by_name": True}
