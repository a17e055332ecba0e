# mood log models — finalized mood records and history responses

from typing import Optional
from pydantic import BaseModel, Field

from moodflow.models.diary import EntryPayload


class Wellness(BaseModel):
    """1-10 wellness sliders recorded alongside the mood"""
    sleep: int = Field(5, ge=1, le=10)
    stress: int = Field(5, ge=1, le=10)
    energy: int = Field(5, ge=1, le=10)
    social: int = Field(5, ge=1, le=10)


class Habits(BaseModel):
    exercise: bool = False
    meditation: bool = False
    nutrition: bool = False
    gratitude: bool = False


class MoodLogCreate(EntryPayload):
    """payload to persist a completed diary entry, plus the day's context"""
    activities: list[str] = Field(default_factory=list)
    wellness: Wellness = Field(default_factory=Wellness)
    habits: Habits = Field(default_factory=Habits)


class MoodLogResponse(BaseModel):
    """a finalized mood record from the mood_logs collection"""
    id: str
    user_id: str = Field(..., alias="userId")
    mood: int
    description: str = ""
    activities: list[str] = Field(default_factory=list)
    wellness: Wellness = Field(default_factory=Wellness)
    habits: Habits = Field(default_factory=Habits)
    emotion: str = ""
    sentiment: str = "neutral"
    confidence: int = 0
    keywords: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    has_explicit_mood: bool = Field(False, alias="hasExplicitMood")
    ai_analysis_used: bool = Field(False, alias="aiAnalysisUsed")
    fallback_questions_used: bool = Field(False, alias="fallbackQuestionsUsed")
    created_at: str = Field("", alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    model_config = {"populate_by_name": True}


class MoodLogSubmitResponse(BaseModel):
    log_id: str = Field(..., alias="logId")
    mood: int
    message: str = "Mood log saved successfully."

    model_config = {"populate_by_name": True}


class MoodInsightsResponse(BaseModel):
    """insights computed over the user's recent mood logs"""
    total_logs: int = Field(0, alias="totalLogs")
    average_mood: Optional[float] = Field(None, alias="averageMood")
    trend: str = "stable"
    most_common_activity: Optional[str] = Field(None, alias="mostCommonActivity")
    insights: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}
