"""진행 Core 패키지 (방 순회 / 점수 / 승리 / 스냅샷)"""

from src.core.progression.controller import ProgressionController
from src.core.progression.models import (
    SCHEMA_VERSION,
    AnswerOutcome,
    CategoryStats,
    ProgressionState,
)
from src.core.progression.scoring import (
    VictoryProgress,
    final_bonuses,
    performance_grade,
    performance_score,
    time_bonus,
    victory_progress,
)
from src.core.progression.snapshot import (
    migrate_v1,
    snapshot_to_state,
    state_to_snapshot,
)

__all__ = [
    "ProgressionController",
    "SCHEMA_VERSION",
    "AnswerOutcome",
    "CategoryStats",
    "ProgressionState",
    "VictoryProgress",
    "final_bonuses",
    "performance_grade",
    "performance_score",
    "time_bonus",
    "victory_progress",
    "migrate_v1",
    "snapshot_to_state",
    "state_to_snapshot",
]
