# mood flow router — stateless diary flow steps
# the client sends its current DiaryEntry snapshot and gets the next one back

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from moodflow.models.diary import (
    AnswerPayload,
    DiaryCreate,
    EntryPayload,
    ExplicitMoodPayload,
    MoodFlowState,
)
from moodflow.services.mood_flow import MoodFlowService
from moodflow.dependencies import get_current_user_id, get_mood_flow_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mood-flow", tags=["mood-flow"])


@router.post("/entries", response_model=MoodFlowState, status_code=status.HTTP_201_CREATED)
async def start_entry(
    body: DiaryCreate,
    user_id: str = Depends(get_current_user_id),
    flow: MoodFlowService = Depends(get_mood_flow_service),
):
    """start a diary entry from free text"""
    entry = flow.create_diary_entry(body.text)
    logger.info(f"Diary entry started by {user_id} ({len(body.text)} chars)")
    return flow.get_flow_state(entry)


@router.post("/explicit-mood", response_model=MoodFlowState)
async def pick_mood(
    body: ExplicitMoodPayload,
    user_id: str = Depends(get_current_user_id),
    flow: MoodFlowService = Depends(get_mood_flow_service),
):
    """user picked a mood from the 1-5 selector"""
    entry = flow.set_explicit_mood(body.entry, body.mood)
    return flow.get_flow_state(entry)


@router.post("/analyze", response_model=MoodFlowState)
async def analyze_entry(
    body: EntryPayload,
    user_id: str = Depends(get_current_user_id),
    flow: MoodFlowService = Depends(get_mood_flow_service),
):
    """user skipped the selector, classify the diary text"""
    entry = await flow.analyze_with_ai(body.entry)
    return flow.get_flow_state(entry)


@router.post("/fallback-questions", response_model=MoodFlowState)
async def reject_analysis(
    body: EntryPayload,
    user_id: str = Depends(get_current_user_id),
    flow: MoodFlowService = Depends(get_mood_flow_service),
):
    """user rejected the ai verdict, draw guided questions and encourage them"""
    entry = flow.generate_fallback_questions(body.entry)
    return flow.get_flow_state(entry, motivational_message=flow.get_motivational_message())


@router.post("/answer", response_model=MoodFlowState)
async def answer_question(
    body: AnswerPayload,
    user_id: str = Depends(get_current_user_id),
    flow: MoodFlowService = Depends(get_mood_flow_service),
):
    """record the answer to the current fallback question"""
    if not flow.has_open_question(body.entry):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No open fallback question for this entry",
        )
    entry = flow.answer_fallback_question(body.entry, body.answer)
    return flow.get_flow_state(entry)


@router.post("/state", response_model=MoodFlowState)
async def derive_state(
    body: EntryPayload,
    user_id: str = Depends(get_current_user_id),
    flow: MoodFlowService = Depends(get_mood_flow_service),
):
    """re-derive the current step and discard eligibility of a snapshot"""
    return flow.get_flow_state(body.entry)
