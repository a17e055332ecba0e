# mood insights — plain-language observations over recent mood logs

from collections import Counter
from typing import Any

MIN_LOGS_FOR_INSIGHTS = 3
TREND_WINDOW = 7


def generate_insights(history: list[dict[str, Any]]) -> dict[str, Any]:
    """compute insights from mood log documents ordered oldest first.
    returns dict with total_logs, average_mood, trend, most_common_activity, insights."""
    moods = [int(h["mood"]) for h in history if isinstance(h.get("mood"), (int, float))]

    if len(moods) < MIN_LOGS_FOR_INSIGHTS:
        return {
            "total_logs": len(history),
            "average_mood": None,
            "trend": "stable",
            "most_common_activity": None,
            "insights": ["Necesitas más datos para generar insights personalizados"],
        }

    insights: list[str] = []
    avg = sum(moods) / len(moods)

    if avg >= 4:
        insights.append("Tu estado de ánimo general es muy positivo. ¡Sigue así!")
    elif avg <= 2:
        insights.append("Has estado experimentando emociones difíciles. Considera buscar apoyo profesional.")
    else:
        insights.append("Tu estado de ánimo se mantiene estable. Esto es una buena base para el crecimiento.")

    recent = moods[-TREND_WINDOW:]
    if recent[-1] > recent[0]:
        trend = "improving"
        insights.append("Has mostrado una tendencia positiva en los últimos días.")
    elif recent[-1] < recent[0]:
        trend = "declining"
        insights.append("Has experimentado una disminución en tu estado de ánimo recientemente.")
    else:
        trend = "stable"

    activity_counts = Counter(a for h in history for a in h.get("activities", []) or [])
    most_common = activity_counts.most_common(1)[0][0] if activity_counts else None
    if most_common:
        insights.append(
            f"Tu actividad más frecuente es {most_common}, lo cual parece ser importante para tu bienestar."
        )

    return {
        "total_logs": len(history),
        "average_mood": round(avg, 2),
        "trend": trend,
        "most_common_activity": most_common,
        "insights": insights,
    }
