"""저장 Service - 스냅샷 ↔ DB 세이브 슬롯 / JSON 파일

Core의 SnapshotStore 프로토콜 구현체.
Service → Core, Service → DB 허용. 저장 실패는 PersistenceError로 올린다.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.errors import PersistenceError
from src.core.logging import get_logger
from src.core.persistence import SnapshotStore, slot_summary
from src.db.models import SaveSlotModel

logger = get_logger(__name__)


class SqlSnapshotStore:
    """save_slots 테이블 기반 저장소 (슬롯당 1행, upsert)"""

    def __init__(self, db: Session):
        self._db = db

    def save(self, slot: str, snapshot: dict[str, Any]) -> None:
        try:
            existing = self._db.get(SaveSlotModel, slot)
            if existing:
                existing.schema_version = int(snapshot.get("schema_version", 0))
                existing.payload = snapshot
                existing.score = int(snapshot.get("score", 0))
                existing.saved_at = datetime.now(timezone.utc)
            else:
                self._db.add(
                    SaveSlotModel(
                        slot_id=slot,
                        schema_version=int(snapshot.get("schema_version", 0)),
                        payload=snapshot,
                        score=int(snapshot.get("score", 0)),
                        saved_at=datetime.now(timezone.utc),
                    )
                )
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"세이브 슬롯 저장 실패: {slot} ({e})")
            raise PersistenceError(f"Failed to save slot {slot}") from e

        logger.debug(f"세이브 슬롯 저장: {slot}")

    def load(self, slot: str) -> Optional[dict[str, Any]]:
        try:
            model = self._db.get(SaveSlotModel, slot)
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError(f"Failed to read slot {slot}") from e

        if model is None:
            return None
        if not isinstance(model.payload, dict):
            raise PersistenceError(f"Slot {slot} payload is not an object")
        return dict(model.payload)

    def clear(self, slot: str) -> None:
        try:
            model = self._db.get(SaveSlotModel, slot)
            if model is not None:
                self._db.delete(model)
                self._db.commit()
                logger.info(f"세이브 슬롯 삭제: {slot}")
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError(f"Failed to clear slot {slot}") from e

    def list_slots(self) -> list[dict[str, Any]]:
        try:
            rows = self._db.query(SaveSlotModel).order_by(SaveSlotModel.slot_id).all()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise PersistenceError("Failed to list save slots") from e
        return [
            {
                "slot_id": row.slot_id,
                "schema_version": row.schema_version,
                "score": row.score,
                "saved_at": row.saved_at.isoformat(),
            }
            for row in rows
        ]


class JsonFileSnapshotStore:
    """디렉터리 안의 <slot>.json 파일 (내보내기 / 가져오기)"""

    def __init__(self, directory: str | Path):
        self._dir = Path(directory)

    def path_for(self, slot: str) -> Path:
        return self._dir / f"{slot}.json"

    def save(self, slot: str, snapshot: dict[str, Any]) -> None:
        path = self.path_for(slot)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise PersistenceError(f"Failed to write {path}: {e}") from e

    def load(self, slot: str) -> Optional[dict[str, Any]]:
        path = self.path_for(slot)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"{path} does not contain a snapshot object")
        return data

    def clear(self, slot: str) -> None:
        path = self.path_for(slot)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to delete {path}: {e}") from e

    def list_slots(self) -> list[dict[str, Any]]:
        """읽을 수 없는 파일은 경고 후 목록에서 제외"""
        slots: list[dict[str, Any]] = []
        for path in sorted(self._dir.glob("*.json")):
            try:
                snapshot = self.load(path.stem)
            except PersistenceError as e:
                logger.warning(f"세이브 파일 건너뜀: {path.name} ({e})")
                continue
            if snapshot is not None:
                slots.append(slot_summary(path.stem, snapshot))
        return slots


SAVE_BACKENDS = ("sql", "file")


def create_snapshot_store(
    backend: str,
    db: Optional[Session] = None,
    directory: str | Path = "saves",
) -> SnapshotStore:
    """설정값(SAVE_BACKEND)에 맞는 저장소 생성"""
    if backend == "sql":
        if db is None:
            raise ValueError("SQL snapshot store requires a database session")
        return SqlSnapshotStore(db)
    if backend == "file":
        return JsonFileSnapshotStore(directory)
    raise ValueError(
        f"Unknown save backend: {backend!r} (expected one of {', '.join(SAVE_BACKENDS)})"
    )
