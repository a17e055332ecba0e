# llm journal analyzer — gemini via langchain
# asks the model for a json verdict on a diary entry
#
# the mood flow treats any failure here (no api key, network error, bad json,
# out-of-range values) as "no verdict" and falls back to the keyword classifier.

import json
import logging
import re
from typing import Optional

from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.output_parsers import StrOutputParser

from moodflow.config import settings
from moodflow.models.diary import AIAnalysis

logger = logging.getLogger(__name__)

CONCLUDE_CONFIDENCE = 70

ANALYSIS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """Eres un psicólogo especializado en análisis de diarios personales.
Analiza la entrada de diario del usuario y estima su estado de ánimo.

Responde SOLO en formato JSON válido, sin texto adicional:
{{
  "emotion": "emoción principal en español (p. ej. Felicidad, Tristeza, Ansiedad, Calma)",
  "sentiment": "positive" | "negative" | "neutral",
  "confidence": número entero de 0 a 100,
  "mood": número entero de 1 a 5
}}

Si el texto no permite concluir el estado de ánimo, usa una confianza baja."""),
    ("human", "Entrada de diario: \"{entry}\""),
])

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def get_llm() -> ChatGoogleGenerativeAI:
    """create a gemini llm instance for diary analysis"""
    return ChatGoogleGenerativeAI(
        model=settings.GEMINI_MODEL,
        google_api_key=settings.GEMINI_API_KEY,
        temperature=0.3,
        max_output_tokens=300,
    )


def parse_analysis(raw: str) -> Optional[AIAnalysis]:
    """parse the model's json answer into an AIAnalysis.
    returns None when the answer is not usable."""
    text = _FENCE_RE.sub("", (raw or "").strip())
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"LLM analysis was not valid json: {text[:80]}")
        return None

    if not isinstance(data, dict):
        return None

    sentiment = str(data.get("sentiment", "")).lower()
    if sentiment not in ("positive", "negative", "neutral"):
        return None

    try:
        confidence = int(data.get("confidence"))
        mood = int(data.get("mood"))
    except (TypeError, ValueError, OverflowError):
        return None

    if not 0 <= confidence <= 100 or not 1 <= mood <= 5:
        return None

    can_conclude = confidence >= CONCLUDE_CONFIDENCE
    return AIAnalysis(
        emotion=str(data.get("emotion") or "Calma"),
        confidence=confidence,
        sentiment=sentiment,
        canConclude=can_conclude,
        moodScore=mood if can_conclude else None,
        keywords=[],
        source="llm",
    )


class JournalAnalyzer:
    """llm collaborator for the mood flow. the chain is built on first use."""

    def __init__(self, llm: Optional[ChatGoogleGenerativeAI] = None):
        self._llm = llm
        self._chain = None

    @property
    def chain(self):
        if self._chain is None:
            llm = self._llm or get_llm()
            self._chain = ANALYSIS_PROMPT | llm | StrOutputParser()
        return self._chain

    async def analyze(self, text: str) -> Optional[AIAnalysis]:
        """returns the model verdict, or None on any failure"""
        try:
            raw = await self.chain.ainvoke({"entry": text})
            return parse_analysis(raw)
        except Exception as e:
            logger.warning(f"LLM diary analysis failed, using keyword fallback: {e}")
            return None


def build_journal_analyzer() -> Optional[JournalAnalyzer]:
    """analyzer when gemini is configured and enabled, otherwise None"""
    if not settings.LLM_ANALYSIS_ENABLED or not settings.GEMINI_API_KEY:
        return None
    return JournalAnalyzer()
