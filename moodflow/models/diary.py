# diary flow models — in-flight diary entry snapshots and flow step payloads
# entries are frozen: every flow step returns a new snapshot via model_copy

from datetime import datetime, timezone
from typing import Optional, Literal
from pydantic import BaseModel, Field, field_validator, model_validator

from moodflow.config import settings

Sentiment = Literal["positive", "negative", "neutral"]
FlowStep = Literal["diary", "mood_selection", "ai_analysis", "fallback_questions", "complete"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AIAnalysis(BaseModel):
    """classifier verdict attached to a diary entry"""
    emotion: str
    confidence: int = Field(..., ge=0, le=100)
    sentiment: Sentiment
    can_conclude: bool = Field(..., alias="canConclude")
    mood_score: Optional[int] = Field(None, ge=1, le=5, alias="moodScore")
    keywords: list[str] = Field(default_factory=list)
    source: Literal["keywords", "llm"] = "keywords"

    model_config = {"populate_by_name": True, "frozen": True}


class DiaryEntry(BaseModel):
    """a single journal entry on its way to a finalized mood score"""
    text: str = Field(..., max_length=settings.DIARY_MAX_LENGTH)
    timestamp: datetime = Field(default_factory=_utcnow)
    has_explicit_mood: bool = Field(False, alias="hasExplicitMood")
    explicit_mood: Optional[int] = Field(None, ge=1, le=5, alias="explicitMood")
    ai_analysis: Optional[AIAnalysis] = Field(None, alias="aiAnalysis")
    fallback_questions: Optional[list[str]] = Field(None, alias="fallbackQuestions")
    current_question_index: Optional[int] = Field(None, ge=0, alias="currentQuestionIndex")
    user_responses: list[str] = Field(default_factory=list, alias="userResponses")
    final_mood: Optional[int] = Field(None, ge=1, le=5, alias="finalMood")
    is_complete: bool = Field(False, alias="isComplete")

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="after")
    def check_completion(self) -> "DiaryEntry":
        """snapshots sent back by clients must be consistent with the flow"""
        if self.is_complete != (self.final_mood is not None):
            raise ValueError("isComplete must be true exactly when finalMood is set")
        if self.has_explicit_mood != (self.explicit_mood is not None):
            raise ValueError("explicitMood must be set exactly when hasExplicitMood is true")
        if self.is_complete and not self._completed_by_a_step():
            raise ValueError("finalMood does not match any completed flow step")
        return self

    def _completed_by_a_step(self) -> bool:
        if self.has_explicit_mood and self.explicit_mood == self.final_mood:
            return True
        analysis = self.ai_analysis
        if analysis is not None and analysis.can_conclude and analysis.mood_score == self.final_mood:
            return True
        questions = self.fallback_questions or []
        return (
            len(questions) > 0
            and (self.current_question_index or 0) >= len(questions)
            and len(self.user_responses) >= len(questions)
        )


class MoodFlowState(BaseModel):
    """derived view of an entry: which step the ui should render"""
    current_step: FlowStep = Field(..., alias="currentStep")
    diary_entry: DiaryEntry = Field(..., alias="diaryEntry")
    show_mood_selector: bool = Field(False, alias="showMoodSelector")
    show_ai_analysis: bool = Field(False, alias="showAiAnalysis")
    show_fallback_questions: bool = Field(False, alias="showFallbackQuestions")
    should_discard: bool = Field(False, alias="shouldDiscard")
    motivational_message: Optional[str] = Field(None, alias="motivationalMessage")

    model_config = {"populate_by_name": True}


# request bodies for the flow router

class DiaryCreate(BaseModel):
    """payload to start a new diary entry"""
    text: str = Field(
        ...,
        min_length=settings.DIARY_MIN_LENGTH,
        max_length=settings.DIARY_MAX_LENGTH,
        description="diary text",
    )


class EntryPayload(BaseModel):
    """a diary entry snapshot sent back by the client"""
    entry: DiaryEntry

    @field_validator("entry")
    @classmethod
    def entry_has_text(cls, v: DiaryEntry) -> DiaryEntry:
        if len(v.text) < settings.DIARY_MIN_LENGTH:
            raise ValueError(f"Diary text must be at least {settings.DIARY_MIN_LENGTH} characters")
        return v


class ExplicitMoodPayload(EntryPayload):
    mood: int = Field(..., ge=1, le=5, description="mood picked by the user")


class AnswerPayload(EntryPayload):
    answer: str = Field(..., max_length=500, description="answer to the current fallback question")
