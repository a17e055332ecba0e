# crisis router — assess a check-in, persist the assessment, alert the psychologist
# history lookups and alert writes degrade gracefully, the assessment always returns

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status, Query

from moodflow.config import settings
from moodflow.models.crisis import (
    CrisisAssessment,
    CrisisAssessmentRecord,
    CrisisAssessRequest,
    CrisisAssessResponse,
    HistoryRecord,
    WellnessMetrics,
)
from moodflow.services.crisis_detection import CrisisDetector
from moodflow.services.db import Database, get_db
from moodflow.dependencies import get_crisis_detector, get_current_user_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/crisis", tags=["crisis"])


async def _load_history(user_id: str, db: Database) -> list[HistoryRecord]:
    """recent mood logs as history records, newest first.
    returns an empty list if the lookup fails."""
    try:
        cursor = (
            db.mood_logs.find({"user_id": user_id}, {"mood": 1, "activities": 1, "created_at": 1})
            .sort("created_at", -1)
            .limit(settings.CRISIS_HISTORY_LIMIT)
        )
        history = []
        async for doc in cursor:
            history.append(HistoryRecord(
                mood=doc.get("mood"),
                activities=doc.get("activities", []) or [],
                createdAt=doc.get("created_at"),
            ))
        return history
    except Exception as e:
        logger.warning(f"Could not load mood history for {user_id}: {e}")
        return []


async def _notify_psychologist(user_id: str, assessment: CrisisAssessment, db: Database) -> bool:
    """raise a crisis alert and a notification for the patient's active psychologist.
    returns True when an alert was written."""
    try:
        patient = await db.patients.find_one({"user_id": user_id, "status": "active"})
        psychologist_id = patient.get("psychologist_id") if patient else None
        if not psychologist_id:
            logger.info(f"No active psychologist for {user_id}, crisis alert skipped")
            return False

        now = datetime.now(timezone.utc).isoformat()
        risk = assessment.overall_risk

        await db.crisis_alerts.insert_one({
            "user_id": user_id,
            "psychologist_id": psychologist_id,
            "assessment": assessment.model_dump(mode="json"),
            "urgency": risk,
            "created_at": now,
            "resolved": False,
            "notification_sent": True,
            "message": f"Alerta de crisis detectada para paciente. Riesgo: {risk}",
        })

        await db.notifications.insert_one({
            "user_id": psychologist_id,
            "title": "🚨 Alerta de Crisis",
            "message": f"Se ha detectado una crisis en uno de tus pacientes. Riesgo: {risk}",
            "type": "crisis",
            "priority": "urgent" if risk == "critical" else "high",
            "read": False,
            "created_at": now,
        })

        logger.info(f"Crisis alert ({risk}) sent to psychologist {psychologist_id} for {user_id}")
        return True
    except Exception as e:
        # non-critical, the assessment itself is already stored
        logger.warning(f"Could not notify psychologist for {user_id}: {e}")
        return False


@router.post("/assess", response_model=CrisisAssessResponse, status_code=status.HTTP_201_CREATED)
async def assess_checkin(
    body: CrisisAssessRequest,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    detector: CrisisDetector = Depends(get_crisis_detector),
):
    """assess a wellness check-in against the caller's recent history"""
    history = await _load_history(user_id, db)
    metrics = WellnessMetrics(**body.model_dump())
    assessment = detector.assess(metrics, history)

    result = await db.crisis_assessments.insert_one({
        "user_id": user_id,
        "assessment": assessment.model_dump(mode="json"),
        "overall_risk": assessment.overall_risk,
        "created_at": datetime.now(timezone.utc).isoformat(),
    })

    alert_sent = False
    if assessment.psychologist_notification:
        alert_sent = await _notify_psychologist(user_id, assessment, db)

    return CrisisAssessResponse(
        assessmentId=str(result.inserted_id),
        assessment=assessment,
        alertSent=alert_sent,
    )


@router.get("/assessments", response_model=list[CrisisAssessmentRecord])
async def recent_assessments(
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    """the caller's most recent crisis assessments"""
    cursor = db.crisis_assessments.find({"user_id": user_id}).sort("created_at", -1).limit(limit)
    records = []
    async for doc in cursor:
        records.append(CrisisAssessmentRecord(
            id=str(doc.get("_id", "")),
            userId=doc.get("user_id", ""),
            assessment=CrisisAssessment.model_validate(doc.get("assessment", {})),
            createdAt=str(doc.get("created_at", "")),
        ))
    return records
