# text sentiment classifier — transparent keyword rules, no learned model
# maps diary text to sentiment, bounded confidence, emotion label and a 1-5 mood
#
# matching defaults to substring search over the lowercased text, so "mal"
# also hits inside "maleta". whole-word matching is available via
# settings.SENTIMENT_WHOLE_WORD_MATCH.

import logging
import re
from typing import Optional

from moodflow.models.diary import AIAnalysis
from moodflow.models.mood_log import Wellness, Habits

logger = logging.getLogger(__name__)

POSITIVE_KEYWORDS = [
    "bien", "feliz", "contento", "genial", "excelente", "maravilloso", "perfecto", "increíble",
    "fantástico", "alegre", "optimista", "motivado", "energético", "satisfecho", "orgulloso", "agradecido",
]

NEGATIVE_KEYWORDS = [
    "mal", "triste", "deprimido", "ansioso", "preocupado", "estresado", "cansado", "frustrado",
    "enojado", "molesto", "desanimado", "solo", "vacío", "perdido", "confundido", "asustado",
]

# "bien" is deliberately in both positive and neutral lists
NEUTRAL_KEYWORDS = [
    "normal", "regular", "ok", "bien", "neutral", "equilibrado", "tranquilo", "calmado",
    "estable", "rutinario", "habitual",
]

MIN_CONFIDENCE = 40
MAX_CONFIDENCE = 95
CONFIDENCE_PER_HIT = 8
CONCLUDE_CONFIDENCE = 70
CONCLUDE_MIN_HITS = 2
STRONG_HITS = 3

SUGGESTIONS = {
    "positive": [
        "¡Excelente! Mantén estas actividades que te hacen sentir bien",
        "Considera compartir tu experiencia positiva con otros",
        "Continúa con tus hábitos saludables actuales",
        "Aprovecha esta energía positiva para establecer nuevas metas",
    ],
    "negative": [
        "Considera hacer ejercicio para mejorar tu estado de ánimo",
        "La meditación puede ayudarte a reducir el estrés y la ansiedad",
        "Habla con un profesional de la salud mental si persisten estos sentimientos",
        "Mantén una rutina de sueño regular para mejorar tu bienestar",
        "Practica técnicas de respiración profunda cuando te sientas abrumado",
    ],
    "neutral": [
        "Mantén un equilibrio en tus actividades diarias",
        "Considera agregar nuevas actividades que te generen interés",
        "La estabilidad es buena, pero no olvides buscar momentos de alegría",
        "Practica la gratitud diaria para mejorar tu perspectiva",
    ],
}

MAX_SUGGESTIONS = 4
MAX_KEYWORDS = 5


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class SentimentClassifier:
    """keyword based sentiment scorer for diary text.
    stateless apart from the static keyword tables."""

    def __init__(self, whole_word: bool = False):
        self.whole_word = whole_word

    def _contains(self, text: str, keyword: str) -> bool:
        if self.whole_word:
            return re.search(rf"\b{re.escape(keyword)}\b", text) is not None
        return keyword in text

    def matched_keywords(self, text: str, keywords: list[str]) -> list[str]:
        """keywords from the list that occur in the (already lowercased) text"""
        return [kw for kw in keywords if self._contains(text, kw)]

    def count_keywords(self, text: str) -> dict[str, int]:
        """per-category hit counts, each keyword counts at most once"""
        lowered = (text or "").lower()
        return {
            "positive": len(self.matched_keywords(lowered, POSITIVE_KEYWORDS)),
            "negative": len(self.matched_keywords(lowered, NEGATIVE_KEYWORDS)),
            "neutral": len(self.matched_keywords(lowered, NEUTRAL_KEYWORDS)),
        }

    @staticmethod
    def resolve_sentiment(positive: int, negative: int, neutral: int) -> str:
        """strict majority wins, any tie resolves to neutral"""
        if positive > negative and positive > neutral:
            return "positive"
        if negative > positive and negative > neutral:
            return "negative"
        return "neutral"

    @staticmethod
    def confidence_for(total_hits: int) -> int:
        return clamp(MIN_CONFIDENCE + CONFIDENCE_PER_HIT * total_hits, MIN_CONFIDENCE, MAX_CONFIDENCE)

    @staticmethod
    def emotion_for(sentiment: str, hits: int) -> str:
        if sentiment == "positive":
            return "Felicidad" if hits >= STRONG_HITS else "Tranquilidad"
        if sentiment == "negative":
            return "Tristeza" if hits >= STRONG_HITS else "Ansiedad"
        return "Calma"

    @staticmethod
    def mood_score_for(sentiment: str, hits: int) -> int:
        """derive the 1-5 mood score from the verdict"""
        if sentiment == "positive":
            return 5 if hits >= STRONG_HITS else 4
        if sentiment == "negative":
            return 1 if hits >= STRONG_HITS else 2
        return 3

    def analyze_text(self, text: str) -> AIAnalysis:
        """classify diary text. never raises, empty text gives a 40% neutral verdict."""
        lowered = (text or "").lower()
        positive = self.matched_keywords(lowered, POSITIVE_KEYWORDS)
        negative = self.matched_keywords(lowered, NEGATIVE_KEYWORDS)
        neutral = self.matched_keywords(lowered, NEUTRAL_KEYWORDS)

        sentiment = self.resolve_sentiment(len(positive), len(negative), len(neutral))
        total = len(positive) + len(negative) + len(neutral)
        confidence = self.confidence_for(total)
        can_conclude = confidence >= CONCLUDE_CONFIDENCE and total >= CONCLUDE_MIN_HITS

        category_hits = {"positive": len(positive), "negative": len(negative), "neutral": len(neutral)}[sentiment]

        # keep first occurrence order, "bien" may be matched twice
        found: list[str] = []
        for kw in positive + negative + neutral:
            if kw not in found:
                found.append(kw)

        logger.debug(
            f"Keyword sentiment: pos={len(positive)} neg={len(negative)} neu={len(neutral)} "
            f"-> {sentiment} ({confidence}%)"
        )

        return AIAnalysis(
            emotion=self.emotion_for(sentiment, category_hits),
            confidence=confidence,
            sentiment=sentiment,
            canConclude=can_conclude,
            moodScore=self.mood_score_for(sentiment, category_hits) if can_conclude else None,
            keywords=found[:MAX_KEYWORDS],
            source="keywords",
        )

    def build_suggestions(
        self,
        sentiment: str,
        wellness: Optional[Wellness] = None,
        habits: Optional[Habits] = None,
    ) -> list[str]:
        """canned suggestions for the sentiment plus wellness and habit nudges, capped at 4.
        unknown sentiments use the neutral list."""
        base = list(SUGGESTIONS.get(sentiment, SUGGESTIONS["neutral"]))
        extra: list[str] = []

        if wellness is not None:
            if wellness.sleep < 5:
                extra.append("Considera mejorar tu rutina de sueño para un mejor descanso")
            if wellness.stress > 7:
                extra.append("Practica técnicas de relajación para manejar el estrés")
            if wellness.energy < 5:
                extra.append("El ejercicio regular puede aumentar tus niveles de energía")
            if wellness.social < 5:
                extra.append("Conecta con amigos o familia para mejorar tu bienestar social")

        if habits is not None:
            if not habits.exercise:
                extra.append("Incluye actividad física en tu rutina diaria")
            if not habits.meditation:
                extra.append("La meditación diaria puede mejorar tu bienestar mental")
            if not habits.gratitude:
                extra.append("Practica la gratitud diaria para una perspectiva más positiva")

        # two sentiment suggestions, then nudges, then the remaining sentiment ones
        ordered = base[:2] + extra + base[2:]
        return ordered[:MAX_SUGGESTIONS]
