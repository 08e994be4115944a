"""점수 계산 순수 함수 테스트"""

import pytest

from src.core.achievements.statistics import Statistics
from src.core.progression.scoring import (
    final_bonuses,
    format_duration,
    performance_grade,
    performance_score,
    time_bonus,
    victory_progress,
)


def _stats(**kwargs) -> Statistics:
    defaults = dict(
        score=0,
        rooms_visited=1,
        rooms_total=10,
        visited_room_ids=frozenset({"entrance"}),
        questions_answered=0,
        questions_total=100,
        correct_answers=0,
    )
    defaults.update(kwargs)
    return Statistics(**defaults)


class TestTimeBonus:
    def test_proportional(self):
        assert time_bonus(0.8) == 40
        assert time_bonus(1.0) == 50
        assert time_bonus(0.0) == 0

    def test_floor(self):
        assert time_bonus(0.33) == 16

    def test_capped(self):
        assert time_bonus(1.5) == 50
        assert time_bonus(-0.2) == 0

    def test_hint_disables_bonus(self):
        assert time_bonus(0.8, hint_used=True) == 0

    def test_custom_max(self):
        assert time_bonus(0.5, max_bonus=20) == 10


class TestVictoryProgress:
    def test_exact_thresholds_satisfy(self):
        progress = victory_progress(
            _stats(rooms_visited=8, questions_answered=70, correct_answers=49)
        )
        assert progress.exploration_ratio == pytest.approx(0.8)
        assert progress.accuracy == pytest.approx(0.7)
        assert progress.satisfied

    def test_no_answers_means_zero_accuracy(self):
        progress = victory_progress(_stats(rooms_visited=10))
        assert progress.accuracy == 0.0
        assert not progress.satisfied


class TestFinalBonuses:
    def test_scenario_d_bonuses(self):
        bonuses = final_bonuses(
            _stats(
                rooms_visited=8,
                questions_answered=75,
                correct_answers=54,
                elapsed_seconds=1200.0,
            )
        )
        assert bonuses == {
            "completion": 500,
            "exploration": 80,
            "accuracy": 720,
            "speed": 0,
        }

    def test_perfect_accuracy_bonus(self):
        bonuses = final_bonuses(
            _stats(questions_answered=10, correct_answers=10, elapsed_seconds=599.0)
        )
        assert bonuses["accuracy"] == 2000
        assert bonuses["speed"] == 750


class TestPerformance:
    def test_weighted_score(self):
        stats = _stats(
            rooms_visited=5, questions_answered=50, correct_answers=40
        )
        # 0.5 * 80 + 0.3 * 50 + 0.2 * 50
        assert performance_score(stats) == 65
        assert performance_grade(65) == "C"

    @pytest.mark.parametrize(
        "score,grade",
        [(100, "S"), (95, "S"), (90, "A"), (80, "B"), (70, "C"), (55, "D"), (10, "F")],
    )
    def test_grades(self, score, grade):
        assert performance_grade(score) == grade


class TestFormatDuration:
    def test_formats(self):
        assert format_duration(42) == "42s"
        assert format_duration(125) == "2m 5s"
        assert format_duration(3725) == "1h 2m 5s"
