"""스냅샷 저장소 인터페이스

GameSession은 이 프로토콜에만 의존한다. DB/파일 구현은 services 계층에 있다.
"""

import copy
from typing import Any, Optional, Protocol


class SnapshotStore(Protocol):
    def save(self, slot: str, snapshot: dict[str, Any]) -> None: ...

    def load(self, slot: str) -> Optional[dict[str, Any]]: ...

    def clear(self, slot: str) -> None: ...

    def list_slots(self) -> list[dict[str, Any]]: ...


class MemorySnapshotStore:
    """프로세스 내 저장소 (테스트, DB 없는 실행)"""

    def __init__(self) -> None:
        self._slots: dict[str, dict[str, Any]] = {}

    def save(self, slot: str, snapshot: dict[str, Any]) -> None:
        self._slots[slot] = copy.deepcopy(snapshot)

    def load(self, slot: str) -> Optional[dict[str, Any]]:
        snapshot = self._slots.get(slot)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def clear(self, slot: str) -> None:
        self._slots.pop(slot, None)

    def list_slots(self) -> list[dict[str, Any]]:
        return [
            slot_summary(slot, snapshot) for slot, snapshot in sorted(self._slots.items())
        ]

    def __contains__(self, slot: str) -> bool:
        return slot in self._slots


def slot_summary(slot: str, snapshot: dict[str, Any]) -> dict[str, Any]:
    """세이브 슬롯 목록용 요약 (payload 전체는 노출하지 않음)"""
    return {
        "slot_id": slot,
        "schema_version": snapshot.get("schema_version"),
        "score": snapshot.get("score", 0),
        "saved_at": snapshot.get("saved_at"),
    }
