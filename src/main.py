"""FastAPI application entrypoint."""

import asyncio
import random
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.game import router as game_router
from src.api.health import router as health_router
from src.config import settings
from src.core.content.loader import ContentStore
from src.core.errors import GameError
from src.core.event_bus import EventBus
from src.core.game import GameSession
from src.core.logging import attach_event_logger, get_logger, setup_logging
from src.db.database import SessionLocal, init_db
from src.services.persistence_service import create_snapshot_store

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


async def run_tick_loop(session: GameSession, interval: float) -> None:
    """고정 주기로 GameSession.tick 호출 (타이머 / 플레이 시간 / 자동 저장)"""
    while True:
        await asyncio.sleep(interval)
        try:
            session.tick(interval)
        except Exception:
            logger.exception("Tick failed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database tables created.")

    # 콘텐츠 로드 (DataError면 시작 중단)
    logger.info(f"Loading content from {settings.CONTENT_DIR}...")
    content = ContentStore.load_from_dir(settings.CONTENT_DIR)
    logger.info(
        f"Content loaded: {content.room_count} rooms, "
        f"{content.question_count} questions, "
        f"{len(content.achievements)} achievements"
    )

    # GameSession 초기화
    db_session = SessionLocal()
    event_bus = EventBus()
    attach_event_logger(event_bus)
    rng = random.Random(settings.RNG_SEED) if settings.RNG_SEED is not None else None
    game_session = GameSession(
        content,
        event_bus=event_bus,
        rules=settings.game_rules(),
        store=create_snapshot_store(
            settings.SAVE_BACKEND, db=db_session, directory=settings.SAVE_DIR
        ),
        slot=settings.SAVE_SLOT,
        rng=rng,
    )
    if game_session.load():
        logger.info(f"Resumed saved game from slot {settings.SAVE_SLOT}")
    app.state.game_session = game_session
    app.state.event_bus = event_bus

    tick_task = asyncio.create_task(
        run_tick_loop(game_session, settings.TICK_INTERVAL)
    )
    logger.info("Game session initialized.")

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    tick_task.cancel()
    try:
        await tick_task
    except asyncio.CancelledError:
        pass
    try:
        game_session.save(reason="shutdown")
    except GameError:
        logger.warning("Final save failed")
    db_session.close()


app = FastAPI(title="Lobe Labyrinth", lifespan=lifespan)

app.include_router(health_router)
app.include_router(game_router)
