# mood flow service — drives a diary entry to a finalized mood score
#
# steps: diary -> mood_selection -> (explicit pick | ai_analysis) -> fallback_questions -> complete
# every operation takes a DiaryEntry snapshot and returns a new one; the
# service itself holds no per-entry state. final_mood is write-once: once an
# entry is complete, every step returns it unchanged.

import logging
import random
import re
from datetime import datetime, timezone
from typing import Any, Optional

from moodflow.models.diary import AIAnalysis, DiaryEntry, MoodFlowState
from moodflow.models.mood_log import Habits, Wellness
from moodflow.services.llm_service import JournalAnalyzer
from moodflow.services.sentiment import SentimentClassifier

logger = logging.getLogger(__name__)

FALLBACK_QUESTIONS = [
    "¿Cómo te sientes en este momento? (1-5)",
    "¿Qué tan satisfecho estás con tu día? (1-5)",
    "¿Cómo calificarías tu nivel de energía? (1-5)",
    "¿Qué tan positivo te sientes sobre el futuro? (1-5)",
    "¿Cómo te sientes respecto a tus relaciones? (1-5)",
    "¿Qué tan motivado te sientes? (1-5)",
    "¿Cómo calificarías tu bienestar general? (1-5)",
    "¿Qué tan tranquilo te sientes? (1-5)",
]

MOTIVATIONAL_MESSAGES = [
    "Entiendo que puede ser difícil expresar cómo te sientes. Cada paso cuenta para tu bienestar.",
    "No hay respuestas correctas o incorrectas. Solo queremos entender mejor cómo te sientes.",
    "Tu bienestar es importante. Ayúdanos a ayudarte registrando tu estado de ánimo.",
    "Cada entrada nos ayuda a crear un mejor perfil de tu bienestar emocional.",
    "Es normal tener días difíciles. Registrar cómo te sientes es el primer paso para mejorar.",
]

MAX_FALLBACK_QUESTIONS = 3
MIN_MOOD = 1
MAX_MOOD = 5

_NUMBER_RE = re.compile(r"(\d+)")


def parse_numeric_answer(answer: str) -> Optional[int]:
    """first integer embedded in a free-text answer, e.g. '4 de 5' -> 4"""
    match = _NUMBER_RE.search(answer or "")
    return int(match.group(1)) if match else None


def average_mood(responses: list[str]) -> Optional[int]:
    """rounded mean of the numeric answers, clamped to 1-5.
    None when no answer carries a number."""
    scores = [s for s in (parse_numeric_answer(r) for r in responses) if s is not None]
    if not scores:
        return None
    # half-up rounding: 2.5 -> 3
    mean = sum(scores) / len(scores)
    rounded = int(mean + 0.5)
    return max(MIN_MOOD, min(MAX_MOOD, rounded))


class MoodFlowService:
    """diary flow controller. collaborators are injected so tests can pin the
    rng and stub the llm."""

    def __init__(
        self,
        classifier: SentimentClassifier,
        analyzer: Optional[JournalAnalyzer] = None,
        rng: Optional[random.Random] = None,
        question_pool: Optional[list[str]] = None,
    ):
        self.classifier = classifier
        self.analyzer = analyzer
        self.rng = rng or random.Random()
        self.question_pool = list(question_pool or FALLBACK_QUESTIONS)

    # entry lifecycle

    def create_diary_entry(self, text: str) -> DiaryEntry:
        return DiaryEntry(
            text=text,
            timestamp=datetime.now(timezone.utc),
            hasExplicitMood=False,
            isComplete=False,
        )

    def should_show_mood_selector(self, entry: DiaryEntry) -> bool:
        return not entry.has_explicit_mood and len(entry.text) > 0

    def set_explicit_mood(self, entry: DiaryEntry, mood: int) -> DiaryEntry:
        """user picked a mood directly, completes the entry without classification"""
        if entry.is_complete:
            logger.warning("Ignoring explicit mood on an already completed entry")
            return entry
        return entry.model_copy(update={
            "has_explicit_mood": True,
            "explicit_mood": mood,
            "final_mood": mood,
            "is_complete": True,
        })

    async def analyze_with_ai(self, entry: DiaryEntry) -> DiaryEntry:
        """classify the diary text. tries the llm when configured, any failure
        falls back to the keyword classifier. completes the entry only when the
        verdict can conclude."""
        if entry.is_complete:
            return entry

        analysis: Optional[AIAnalysis] = None
        if self.analyzer is not None:
            analysis = await self.analyzer.analyze(entry.text)
        if analysis is None:
            analysis = self.classifier.analyze_text(entry.text)

        logger.info(
            f"Diary analysis ({analysis.source}): {analysis.sentiment} "
            f"{analysis.confidence}% conclude={analysis.can_conclude}"
        )

        can_conclude = analysis.can_conclude and analysis.mood_score is not None
        return entry.model_copy(update={
            "ai_analysis": analysis,
            "final_mood": analysis.mood_score if can_conclude else None,
            "is_complete": can_conclude,
        })

    def generate_fallback_questions(self, entry: DiaryEntry) -> DiaryEntry:
        """draw min(3, pool size) distinct questions and reset the answers"""
        if entry.is_complete:
            return entry
        count = min(MAX_FALLBACK_QUESTIONS, len(self.question_pool))
        selected = self.rng.sample(self.question_pool, count)
        return entry.model_copy(update={
            "fallback_questions": selected,
            "current_question_index": 0,
            "user_responses": [],
        })

    def has_open_question(self, entry: DiaryEntry) -> bool:
        """fallback questions drawn and at least one still unanswered"""
        return (
            self.get_current_step(entry) == "fallback_questions"
            and entry.current_question_index < len(entry.fallback_questions)
        )

    def answer_fallback_question(self, entry: DiaryEntry, answer: str) -> DiaryEntry:
        """record an answer and advance. after the last question the numeric
        answers are averaged into the final mood; with no numeric answer the
        entry stays incomplete. entries without an open question are returned unchanged."""
        if not self.has_open_question(entry):
            logger.warning("Ignoring answer for an entry with no open fallback question")
            return entry

        responses = [*entry.user_responses, answer]
        next_index = entry.current_question_index + 1
        final_mood: Optional[int] = None

        if next_index >= len(entry.fallback_questions):
            final_mood = average_mood(responses)
            if final_mood is None:
                logger.info("Fallback questions answered without any numeric response")

        return entry.model_copy(update={
            "user_responses": responses,
            "current_question_index": next_index,
            "final_mood": final_mood,
            "is_complete": final_mood is not None,
        })

    def get_motivational_message(self) -> str:
        return self.rng.choice(MOTIVATIONAL_MESSAGES)

    def should_discard_entry(self, entry: DiaryEntry) -> bool:
        """an unfinished entry that never got past free text may be discarded
        (after asking the user). guided answers in progress are never discardable."""
        ai_concluded = entry.ai_analysis is not None and entry.ai_analysis.can_conclude
        return (
            not entry.is_complete
            and len(entry.text) > 0
            and not entry.has_explicit_mood
            and not ai_concluded
            and len(entry.user_responses) == 0
        )

    def get_current_step(self, entry: DiaryEntry) -> str:
        if entry.is_complete:
            return "complete"
        if entry.has_explicit_mood:
            return "complete"
        if entry.fallback_questions is not None and entry.current_question_index is not None:
            return "fallback_questions"
        if entry.ai_analysis is not None:
            return "ai_analysis"
        if len(entry.text) > 0:
            return "mood_selection"
        return "diary"

    def get_flow_state(self, entry: DiaryEntry, motivational_message: Optional[str] = None) -> MoodFlowState:
        step = self.get_current_step(entry)
        return MoodFlowState(
            currentStep=step,
            diaryEntry=entry,
            showMoodSelector=step == "mood_selection",
            showAiAnalysis=step == "ai_analysis",
            showFallbackQuestions=step == "fallback_questions",
            shouldDiscard=self.should_discard_entry(entry),
            motivationalMessage=motivational_message,
        )

    # persistence hand-off

    def build_mood_log(
        self,
        entry: DiaryEntry,
        user_id: str,
        activities: Optional[list[str]] = None,
        wellness: Optional[Wellness] = None,
        habits: Optional[Habits] = None,
    ) -> dict[str, Any]:
        """finalized record for the mood_logs collection.
        raises ValueError for an incomplete entry."""
        if not entry.is_complete or entry.final_mood is None:
            raise ValueError("Diary entry is not complete")

        wellness = wellness or Wellness()
        habits = habits or Habits()
        analysis = entry.ai_analysis
        sentiment = analysis.sentiment if analysis else "neutral"
        now = datetime.now(timezone.utc).isoformat()

        return {
            "user_id": user_id,
            "mood": entry.final_mood,
            "description": entry.text,
            "activities": list(activities or []),
            "wellness": wellness.model_dump(),
            "habits": habits.model_dump(),
            "emotion": analysis.emotion if analysis else "",
            "sentiment": sentiment,
            "confidence": analysis.confidence if analysis else 0,
            "keywords": list(analysis.keywords) if analysis else [],
            "suggestions": self.classifier.build_suggestions(sentiment, wellness, habits),
            "has_explicit_mood": entry.has_explicit_mood,
            "ai_analysis_used": analysis is not None,
            "fallback_questions_used": entry.fallback_questions is not None,
            "entry_timestamp": entry.timestamp.isoformat(),
            "created_at": now,
            "updated_at": now,
        }
