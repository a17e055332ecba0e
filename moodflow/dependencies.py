# fastapi dependency injection
# provides the caller identity and explicitly constructed flow / crisis services

import logging
from typing import Optional
from fastapi import Header, HTTPException, status

from moodflow.config import settings
from moodflow.services.crisis_detection import CrisisDetector
from moodflow.services.llm_service import build_journal_analyzer
from moodflow.services.mood_flow import MoodFlowService
from moodflow.services.sentiment import SentimentClassifier

logger = logging.getLogger(__name__)


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> str:
    """caller identity forwarded by the auth provider in front of the api"""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )
    return x_user_id.strip()


def get_sentiment_classifier() -> SentimentClassifier:
    return SentimentClassifier(whole_word=settings.SENTIMENT_WHOLE_WORD_MATCH)


def get_mood_flow_service() -> MoodFlowService:
    """a fresh controller per request, it holds no entry state"""
    return MoodFlowService(
        classifier=get_sentiment_classifier(),
        analyzer=build_journal_analyzer(),
    )


def get_crisis_detector() -> CrisisDetector:
    return CrisisDetector()
