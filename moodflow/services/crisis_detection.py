# crisis detection — rule engine over structured wellness metrics
# five independent checks emit signals, the assessment aggregates them
#
# checks: mood extremity, behavioral trend, free-text crisis patterns,
# social isolation, sleep/energy deterioration.
# never raises on partial input: a missing metric simply skips the checks that need it.

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from moodflow.models.crisis import CrisisAssessment, CrisisSignal, HistoryRecord, WellnessMetrics

logger = logging.getLogger(__name__)

SEVERITY_SCORES = {"critical": 10, "high": 7, "medium": 4, "low": 1}

SOCIAL_ACTIVITIES = {"social", "amigos", "familia", "comunidad"}

# named crisis patterns matched against free-text notes
CRISIS_PATTERNS = {
    "suicidal_ideation": {
        "keywords": ["suicidio", "morir", "acabar", "desaparecer", "no vale la pena", "sin esperanza"],
        "severity": "critical",
    },
    "self_harm": {
        "keywords": ["cortar", "herir", "dañar", "autolesión"],
        "severity": "high",
    },
    "panic_attack": {
        "keywords": ["pánico", "ataque", "no puedo respirar", "me muero"],
        "severity": "high",
    },
    "depression_spiral": {
        "keywords": ["deprimido", "triste", "vacío", "sin energía"],
        "severity": "medium",
    },
    "substance_abuse": {
        "keywords": ["beber", "drogas", "pastillas", "escapar"],
        "severity": "high",
    },
}

MIN_NOTES_LENGTH = 10
MIN_TREND_HISTORY = 3
TREND_WINDOW = 7
MIN_ISOLATION_HISTORY = 5
CONFIDENT_HISTORY = 5

RECOMMENDATIONS = {
    "critical": [
        "🚨 BUSCA AYUDA PROFESIONAL INMEDIATAMENTE",
        "Contacta a un profesional de salud mental o línea de crisis",
        "No estás solo - hay personas que pueden ayudarte",
        "Considera contactar a un familiar o amigo de confianza",
    ],
    "high": [
        "Considera hablar con un profesional de salud mental",
        "Mantén contacto regular con tu red de apoyo",
        "Implementa estrategias de autocuidado diarias",
        "Considera terapia o counseling",
    ],
    "medium": [
        "Monitorea tu bienestar regularmente",
        "Mantén las prácticas que te están funcionando",
        "Considera técnicas de relajación",
        "Mantén rutinas saludables",
    ],
    "low": [
        "Continúa monitoreando tu bienestar",
        "Mantén las prácticas positivas",
    ],
}

IMMEDIATE_ACTIONS = {
    "critical": [
        "Contactar línea de crisis: 911 o línea nacional de prevención del suicidio",
        "Buscar ayuda médica inmediata",
        "Contactar a un familiar o amigo de confianza",
        "Eliminar acceso a medios de autolesión",
    ],
    "high": [
        "Programar cita con profesional de salud mental",
        "Contactar a tu red de apoyo",
        "Implementar técnicas de crisis",
        "Monitorear síntomas regularmente",
    ],
    "medium": [
        "Revisar estrategias de afrontamiento",
        "Mantener rutinas saludables",
        "Practicar técnicas de relajación",
    ],
    "low": [],
}


def severity_score(severity: str) -> int:
    """weight of a severity level, unknown levels weigh 0"""
    return SEVERITY_SCORES.get(severity, 0)


def _has_social_activity(record: HistoryRecord) -> bool:
    return any(str(a).lower() in SOCIAL_ACTIVITIES for a in record.activities)


def _signal(
    prefix: str,
    signal_type: str,
    severity: str,
    description: str,
    metadata: Optional[dict[str, Any]] = None,
) -> CrisisSignal:
    return CrisisSignal(
        id=f"{prefix}-{uuid.uuid4().hex[:12]}",
        signalType=signal_type,
        severity=severity,
        description=description,
        detectedAt=datetime.now(timezone.utc),
        interventionRequired=True,
        metadata={k: v for k, v in (metadata or {}).items() if v is not None},
    )


class CrisisDetector:
    """stateless crisis-risk scorer, one instance serves every request"""

    # individual checks

    def analyze_mood(self, metrics: WellnessMetrics) -> list[CrisisSignal]:
        """extremely low mood with no energy or sleep, or extreme stress with poor sleep"""
        mood, energy, stress, sleep = metrics.mood, metrics.energy, metrics.stress, metrics.sleep

        if None not in (mood, energy, sleep) and mood <= 1 and energy <= 2 and sleep <= 2:
            return [_signal(
                "mood-crisis", "mood", "critical",
                "Estado de ánimo extremadamente bajo combinado con falta de energía y sueño",
                {"moodScore": mood, "energyLevel": energy, "sleepQuality": sleep},
            )]

        if None not in (stress, sleep) and stress >= 9 and sleep <= 3:
            return [_signal(
                "stress-crisis", "mood", "high",
                "Niveles de estrés extremos combinados con problemas de sueño",
                {"stressLevel": stress, "sleepQuality": sleep},
            )]

        return []

    def analyze_behavior(
        self, metrics: WellnessMetrics, history: Optional[list[HistoryRecord]],
    ) -> list[CrisisSignal]:
        """progressive mood decline and isolation while low. needs at least 3 history points."""
        signals: list[CrisisSignal] = []
        if not history or len(history) < MIN_TREND_HISTORY:
            return signals

        # history is most recent first; declining = each newer mood <= the one before it
        recent = [r.mood for r in history[:TREND_WINDOW] if r.mood is not None]
        if len(recent) >= MIN_TREND_HISTORY:
            is_declining = all(recent[i] <= recent[i + 1] for i in range(len(recent) - 1))
            if is_declining and recent[0] <= 2:
                signals.append(_signal(
                    "behavioral-decline", "behavioral", "medium",
                    "Patrón de deterioro progresivo del estado de ánimo",
                    {"moodScore": recent[0]},
                ))

        has_social = any(_has_social_activity(r) for r in history)
        if not has_social and metrics.mood is not None and metrics.mood <= 2:
            signals.append(_signal(
                "social-isolation", "social", "medium",
                "Aislamiento social combinado con bajo estado de ánimo",
                {"moodScore": metrics.mood},
            ))

        return signals

    def analyze_text(self, notes: str) -> list[CrisisSignal]:
        """one verbal signal per crisis pattern with a keyword in the notes"""
        signals: list[CrisisSignal] = []
        if not notes or len(notes) < MIN_NOTES_LENGTH:
            return signals

        text = notes.lower()
        for pattern, config in CRISIS_PATTERNS.items():
            if any(keyword in text for keyword in config["keywords"]):
                signals.append(_signal(
                    pattern.replace("_", "-"), "verbal", config["severity"],
                    f"Detectado patrón de {pattern} en notas del usuario",
                    {"pattern": pattern, "notes": notes},
                ))
        return signals

    def analyze_social(self, history: Optional[list[HistoryRecord]]) -> list[CrisisSignal]:
        """no social activity at all across at least 5 recent logs"""
        if history is None or len(history) < MIN_ISOLATION_HISTORY:
            return []
        if any(_has_social_activity(r) for r in history):
            return []
        return [_signal(
            "social-disconnection", "social", "medium",
            "Pérdida completa de actividades sociales",
            {"historySize": len(history)},
        )]

    def analyze_physical(self, metrics: WellnessMetrics) -> list[CrisisSignal]:
        if metrics.sleep is None or metrics.energy is None:
            return []
        if metrics.sleep <= 2 and metrics.energy <= 3:
            return [_signal(
                "sleep-crisis", "physical", "medium",
                "Deterioro severo del sueño combinado con falta de energía",
                {"sleepQuality": metrics.sleep, "energyLevel": metrics.energy},
            )]
        return []

    # aggregation

    @staticmethod
    def determine_overall_risk(score: int, signals: list[CrisisSignal]) -> str:
        """first matching branch wins: critical, high, medium, low"""
        if any(s.severity == "critical" for s in signals) or score >= 20:
            return "critical"
        if any(s.severity == "high" for s in signals) or score >= 15:
            return "high"
        if score >= 8:
            return "medium"
        return "low"

    @staticmethod
    def calculate_confidence(signals: list[CrisisSignal], history: Optional[list[HistoryRecord]]) -> int:
        confidence = min(len(signals) * 10, 40)
        if history and len(history) >= CONFIDENT_HISTORY:
            confidence += 20
        confidence += 15 * sum(1 for s in signals if s.severity == "critical")
        return min(confidence, 100)

    def assess(
        self,
        metrics: WellnessMetrics,
        history: Optional[list[HistoryRecord]] = None,
    ) -> CrisisAssessment:
        """run every check and aggregate into a single assessment"""
        signals: list[CrisisSignal] = []
        signals.extend(self.analyze_mood(metrics))
        signals.extend(self.analyze_behavior(metrics, history))
        signals.extend(self.analyze_text(metrics.notes))
        signals.extend(self.analyze_social(history))
        signals.extend(self.analyze_physical(metrics))

        score = sum(severity_score(s.severity) for s in signals)
        risk = self.determine_overall_risk(score, signals)

        if signals:
            logger.info(
                f"Crisis assessment: {len(signals)} signals, score={score}, risk={risk}"
            )

        return CrisisAssessment(
            overallRisk=risk,
            signals=signals,
            recommendations=list(RECOMMENDATIONS[risk]),
            immediateActions=list(IMMEDIATE_ACTIONS[risk]),
            followUpRequired=risk != "low",
            psychologistNotification=risk in ("high", "critical"),
            emergencyContact=risk == "critical",
            assessmentScore=score,
            confidence=self.calculate_confidence(signals, history),
        )
