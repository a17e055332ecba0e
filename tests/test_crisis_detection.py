# tests for the crisis detector — signals, scoring, risk levels
# unit tests for moodflow/services/crisis_detection.py

import pytest

from moodflow.models.crisis import CrisisSignal, HistoryRecord, WellnessMetrics
from moodflow.services.crisis_detection import (
    CrisisDetector,
    IMMEDIATE_ACTIONS,
    RECOMMENDATIONS,
    severity_score,
)


@pytest.fixture
def detector():
    return CrisisDetector()


def _metrics(**overrides):
    base = {"mood": 3, "energy": 6, "stress": 4, "sleep": 7, "notes": "", "activities": [], "emotions": []}
    base.update(overrides)
    return WellnessMetrics(**base)


def _history(moods, activities=None):
    """history records, most recent first"""
    return [HistoryRecord(mood=m, activities=activities or ["trabajo"]) for m in moods]


class TestSeverityScore:

    def test_known_levels(self):
        assert severity_score("critical") == 10
        assert severity_score("high") == 7
        assert severity_score("medium") == 4
        assert severity_score("low") == 1

    def test_unknown_level(self):
        assert severity_score("unknown") == 0


class TestMoodCheck:
    """mood extremity and extreme stress"""

    def test_extreme_low_mood_is_critical(self, detector):
        signals = detector.analyze_mood(_metrics(mood=1, energy=2, sleep=2))
        assert len(signals) == 1
        assert signals[0].severity == "critical"
        assert signals[0].signal_type == "mood"
        assert signals[0].metadata["moodScore"] == 1

    def test_extreme_stress_is_high(self, detector):
        signals = detector.analyze_mood(_metrics(stress=9, sleep=3))
        assert [s.severity for s in signals] == ["high"]

    def test_normal_metrics_no_signal(self, detector):
        assert detector.analyze_mood(_metrics()) == []

    def test_missing_metrics_no_signal(self, detector):
        assert detector.analyze_mood(WellnessMetrics(mood=1)) == []


class TestTextCheck:
    """crisis keyword patterns in free-text notes"""

    def test_suicidal_ideation_critical(self, detector):
        signals = detector.analyze_text("Pienso en el suicidio todo el tiempo")
        assert len(signals) == 1
        assert signals[0].severity == "critical"
        assert signals[0].signal_type == "verbal"
        assert signals[0].metadata["pattern"] == "suicidal_ideation"

    def test_one_signal_per_pattern(self, detector):
        # two depression keywords still produce a single signal
        signals = detector.analyze_text("me siento triste y vacío hoy")
        assert [s.metadata["pattern"] for s in signals] == ["depression_spiral"]
        assert signals[0].severity == "medium"

    def test_multiple_patterns(self, detector):
        signals = detector.analyze_text("tuve un ataque de pánico y quise beber")
        patterns = {s.metadata["pattern"] for s in signals}
        assert patterns == {"panic_attack", "substance_abuse"}

    def test_short_notes_ignored(self, detector):
        assert detector.analyze_text("morir") == []

    def test_empty_notes(self, detector):
        assert detector.analyze_text("") == []


class TestHistoryChecks:
    """behavioral trend and social isolation"""

    def test_declining_low_mood(self, detector):
        signals = detector.analyze_behavior(_metrics(mood=3), _history([2, 2, 3, 4]))
        assert [s.signal_type for s in signals] == ["behavioral"]

    def test_improving_mood_not_declining(self, detector):
        signals = detector.analyze_behavior(_metrics(mood=3), _history([4, 3, 2]))
        assert signals == []

    def test_declining_but_not_low(self, detector):
        signals = detector.analyze_behavior(_metrics(mood=3), _history([3, 4, 5]))
        assert signals == []

    def test_needs_three_points(self, detector):
        assert detector.analyze_behavior(_metrics(mood=1), _history([1, 2])) == []

    def test_isolation_while_low(self, detector):
        signals = detector.analyze_behavior(_metrics(mood=2), _history([3, 4, 3]))
        assert [s.signal_type for s in signals] == ["social"]

    def test_social_activity_case_insensitive(self, detector):
        history = _history([3, 4, 3], activities=["Amigos"])
        assert detector.analyze_behavior(_metrics(mood=2), history) == []
        assert detector.analyze_social(_history([3] * 5, activities=["FAMILIA"])) == []

    def test_social_disconnection_needs_five(self, detector):
        assert detector.analyze_social(_history([3, 3, 3, 3])) == []
        signals = detector.analyze_social(_history([3, 3, 3, 3, 3]))
        assert [s.severity for s in signals] == ["medium"]

    def test_no_history(self, detector):
        assert detector.analyze_social(None) == []
        assert detector.analyze_behavior(_metrics(mood=1), None) == []

    def test_history_with_missing_moods(self, detector):
        history = [HistoryRecord(mood=None), HistoryRecord(mood=None), HistoryRecord(mood=None)]
        assert detector.analyze_behavior(_metrics(mood=4), history) == []


class TestPhysicalCheck:

    def test_poor_sleep_and_energy(self, detector):
        signals = detector.analyze_physical(_metrics(sleep=2, energy=3))
        assert [s.signal_type for s in signals] == ["physical"]

    def test_enough_energy(self, detector):
        assert detector.analyze_physical(_metrics(sleep=2, energy=4)) == []


class TestAssessment:
    """aggregation into overall risk, score, confidence, and action lists"""

    def test_no_signals_low_risk(self, detector):
        assessment = detector.assess(_metrics())
        assert assessment.overall_risk == "low"
        assert assessment.assessment_score == 0
        assert assessment.confidence == 0
        assert assessment.signals == []
        assert assessment.recommendations == RECOMMENDATIONS["low"]
        assert assessment.immediate_actions == []
        assert assessment.follow_up_required is False
        assert assessment.psychologist_notification is False

    def test_single_critical_forces_critical(self, detector):
        assessment = detector.assess(_metrics(notes="a veces pienso en el suicidio"))
        assert assessment.assessment_score == 10
        assert assessment.overall_risk == "critical"
        assert assessment.emergency_contact is True
        assert assessment.psychologist_notification is True
        assert assessment.immediate_actions == IMMEDIATE_ACTIONS["critical"]

    def test_critical_mood_plus_physical(self, detector):
        assessment = detector.assess(_metrics(mood=1, energy=2, sleep=2))
        assert sorted(s.severity for s in assessment.signals) == ["critical", "medium"]
        assert assessment.assessment_score == 14
        assert assessment.overall_risk == "critical"
        # 2 signals -> 20, one critical -> +15
        assert assessment.confidence == 35

    def test_high_signal_forces_high(self, detector):
        assessment = detector.assess(_metrics(stress=9, sleep=3))
        assert assessment.assessment_score == 7
        assert assessment.overall_risk == "high"
        assert assessment.emergency_contact is False

    def test_medium_by_score(self, detector):
        # declining + isolation while low + social disconnection = 3 x medium
        history = _history([2, 2, 3, 3, 4])
        assessment = detector.assess(_metrics(mood=2, energy=5, stress=5, sleep=5), history)
        assert assessment.assessment_score == 12
        assert assessment.overall_risk == "medium"
        assert assessment.follow_up_required is True
        assert assessment.psychologist_notification is False
        # 3 signals -> 30, history >= 5 -> +20
        assert assessment.confidence == 50

    def test_high_by_score_without_high_signal(self, detector):
        history = _history([2, 2, 3, 3, 4])
        assessment = detector.assess(_metrics(mood=2, energy=3, stress=5, sleep=2), history)
        assert {s.severity for s in assessment.signals} == {"medium"}
        assert assessment.assessment_score == 16
        assert assessment.overall_risk == "high"

    def test_score_is_sum_not_max(self, detector):
        assessment = detector.assess(_metrics(notes="tuve un ataque de pánico y quise beber"))
        assert assessment.assessment_score == 14

    def test_confidence_capped(self):
        signals = [
            CrisisSignal(id=f"s{i}", signalType="verbal", severity="critical", description="x")
            for i in range(6)
        ]
        assert CrisisDetector.calculate_confidence(signals, _history([1] * 5)) == 100

    def test_overall_risk_order(self):
        assert CrisisDetector.determine_overall_risk(20, []) == "critical"
        assert CrisisDetector.determine_overall_risk(15, []) == "high"
        assert CrisisDetector.determine_overall_risk(8, []) == "medium"
        assert CrisisDetector.determine_overall_risk(7, []) == "low"

    def test_partial_metrics_never_raise(self, detector):
        assessment = detector.assess(WellnessMetrics())
        assert assessment.overall_risk == "low"

    def test_assessment_is_immutable(self, detector):
        assessment = detector.assess(_metrics())
        with pytest.raises(Exception):
            assessment.overall_risk = "critical"
