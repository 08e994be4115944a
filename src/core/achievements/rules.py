"""업적 해금 조건 - 누적 통계에 대한 순수 함수

trigger.type → predicate(stats, trigger) 매핑.
새 조건 유형은 PREDICATES와 PROGRESS_METERS에 함께 등록한다.
"""

from typing import Callable

from src.core.content.models import AchievementTrigger

from .statistics import Statistics

DEFAULT_QUICK_SECONDS = 10.0

Predicate = Callable[[Statistics, AchievementTrigger], bool]
ProgressMeter = Callable[[Statistics, AchievementTrigger], tuple[int, int]]


def _int_value(trigger: AchievementTrigger, default: int = 1) -> int:
    value = trigger.value
    return int(value) if value is not None else default


def _all_rooms_visited(stats: Statistics) -> bool:
    return stats.rooms_total > 0 and stats.rooms_visited >= stats.rooms_total


def _accuracy_with_minimum(stats: Statistics, trigger: AchievementTrigger) -> bool:
    min_questions = int(trigger.param("min_questions", 1))
    required = float(trigger.param("accuracy", trigger.value or 1.0))
    return (
        stats.questions_answered >= min_questions and stats.accuracy >= required
    )


def _quick_answers(stats: Statistics, trigger: AchievementTrigger) -> int:
    limit = float(trigger.param("time_limit", DEFAULT_QUICK_SECONDS))
    return stats.quick_answer_count(limit)


PREDICATES: dict[str, Predicate] = {
    "correct_answers": lambda s, t: s.correct_answers >= _int_value(t),
    "total_questions": lambda s, t: s.questions_answered >= _int_value(t),
    "rooms_visited": lambda s, t: s.rooms_visited >= _int_value(t),
    "all_rooms_visited": lambda s, t: _all_rooms_visited(s),
    "specific_room_visited": lambda s, t: t.value in s.visited_room_ids,
    "quick_answers": lambda s, t: _quick_answers(s, t) >= _int_value(t),
    "consecutive_correct": lambda s, t: s.max_streak >= _int_value(t),
    "comeback_correct": lambda s, t: s.best_comeback >= _int_value(t),
    "accuracy_with_minimum": _accuracy_with_minimum,
    "score_reached": lambda s, t: s.score >= _int_value(t),
    "completion_time": lambda s, t: (
        s.completed and s.elapsed_seconds <= float(t.value or 0)
    ),
    "game_completed": lambda s, t: s.completed,
    "game_completed_perfect": lambda s, t: (
        s.completed
        and _all_rooms_visited(s)
        and s.questions_answered > 0
        and s.correct_answers == s.questions_answered
    ),
    "no_hints": lambda s, t: (
        s.hints_used == 0 and s.questions_answered >= _int_value(t)
    ),
}

KNOWN_TRIGGER_TYPES = frozenset(PREDICATES)


def _counter(current: int, target: int) -> tuple[int, int]:
    return min(current, target), target


PROGRESS_METERS: dict[str, ProgressMeter] = {
    "correct_answers": lambda s, t: _counter(s.correct_answers, _int_value(t)),
    "total_questions": lambda s, t: _counter(s.questions_answered, _int_value(t)),
    "rooms_visited": lambda s, t: _counter(s.rooms_visited, _int_value(t)),
    "all_rooms_visited": lambda s, t: _counter(s.rooms_visited, s.rooms_total),
    "quick_answers": lambda s, t: _counter(_quick_answers(s, t), _int_value(t)),
    "consecutive_correct": lambda s, t: _counter(s.max_streak, _int_value(t)),
    "comeback_correct": lambda s, t: _counter(s.best_comeback, _int_value(t)),
    "accuracy_with_minimum": lambda s, t: _counter(
        s.questions_answered, int(t.param("min_questions", 1))
    ),
    "score_reached": lambda s, t: _counter(max(s.score, 0), _int_value(t)),
    "no_hints": lambda s, t: _counter(
        s.questions_answered if s.hints_used == 0 else 0, _int_value(t)
    ),
}


def is_satisfied(stats: Statistics, trigger: AchievementTrigger) -> bool:
    predicate = PREDICATES.get(trigger.type)
    if predicate is None:
        return False
    return bool(predicate(stats, trigger))


def measure_progress(stats: Statistics, trigger: AchievementTrigger) -> tuple[int, int]:
    """(현재, 최대) 진행도. 카운터가 없는 조건은 0/1 이진값."""
    meter = PROGRESS_METERS.get(trigger.type)
    if meter is None:
        return (1 if is_satisfied(stats, trigger) else 0), 1
    return meter(stats, trigger)
