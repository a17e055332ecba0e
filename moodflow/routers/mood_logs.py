# mood logs router — persist finalized diary entries and read history
# only complete entries are accepted, the flow service builds the record

import logging

from fastapi import APIRouter, Depends, HTTPException, status, Query

from moodflow.config import settings
from moodflow.models.mood_log import (
    MoodInsightsResponse,
    MoodLogCreate,
    MoodLogResponse,
    MoodLogSubmitResponse,
)
from moodflow.services.db import Database, get_db
from moodflow.services.insights import generate_insights
from moodflow.services.mood_flow import MoodFlowService
from moodflow.dependencies import get_current_user_id, get_mood_flow_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mood-logs", tags=["mood-logs"])


def _doc_to_mood_log(doc: dict) -> MoodLogResponse:
    """convert a mongodb mood log document to response model"""
    return MoodLogResponse(
        id=str(doc.get("_id", "")),
        userId=doc.get("user_id", ""),
        mood=int(doc.get("mood", 3)),
        description=doc.get("description", ""),
        activities=doc.get("activities", []) or [],
        wellness=doc.get("wellness") or {},
        habits=doc.get("habits") or {},
        emotion=doc.get("emotion", ""),
        sentiment=doc.get("sentiment", "neutral"),
        confidence=doc.get("confidence", 0),
        keywords=doc.get("keywords", []) or [],
        suggestions=doc.get("suggestions", []) or [],
        hasExplicitMood=doc.get("has_explicit_mood", False),
        aiAnalysisUsed=doc.get("ai_analysis_used", False),
        fallbackQuestionsUsed=doc.get("fallback_questions_used", False),
        createdAt=str(doc.get("created_at", "")),
        updatedAt=doc.get("updated_at"),
    )


async def fetch_recent_logs(user_id: str, db: Database, limit: int) -> list[dict]:
    """most recent mood logs for a user, newest first"""
    cursor = db.mood_logs.find({"user_id": user_id}).sort("created_at", -1).limit(limit)
    logs = []
    async for doc in cursor:
        logs.append(doc)
    return logs


@router.post("", response_model=MoodLogSubmitResponse, status_code=status.HTTP_201_CREATED)
async def save_mood_log(
    body: MoodLogCreate,
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
    flow: MoodFlowService = Depends(get_mood_flow_service),
):
    """persist a completed diary entry as a mood log"""
    try:
        doc = flow.build_mood_log(
            body.entry,
            user_id,
            activities=body.activities,
            wellness=body.wellness,
            habits=body.habits,
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Diary entry is not complete: pick a mood, accept the analysis or answer the questions first",
        )

    result = await db.mood_logs.insert_one(doc)
    log_id = str(result.inserted_id)
    logger.info(f"Mood log saved: {log_id} for user {user_id} (mood={doc['mood']})")

    return MoodLogSubmitResponse(logId=log_id, mood=doc["mood"])


@router.get("", response_model=list[MoodLogResponse])
async def list_mood_logs(
    limit: int = Query(settings.MOOD_LOG_PAGE_SIZE, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    """the caller's mood logs, newest first"""
    docs = await fetch_recent_logs(user_id, db, limit)
    return [_doc_to_mood_log(d) for d in docs]


@router.get("/insights", response_model=MoodInsightsResponse)
async def mood_insights(
    limit: int = Query(settings.MOOD_LOG_PAGE_SIZE, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    db: Database = Depends(get_db),
):
    """plain-language insights over the caller's recent mood logs"""
    docs = await fetch_recent_logs(user_id, db, limit)
    result = generate_insights(list(reversed(docs)))
    return MoodInsightsResponse(
        totalLogs=result["total_logs"],
        averageMood=result["average_mood"],
        trend=result["trend"],
        mostCommonActivity=result["most_common_activity"],
        insights=result["insights"],
    )
