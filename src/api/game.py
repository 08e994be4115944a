"""Game API endpoints.

Routes and the session dependency are `async def`: GameSession is only touched
on the event loop thread, where the tick task also runs.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.api.schemas import (
    AnswerRequest,
    CommandResponse,
    ErrorResponse,
    EventInfo,
    ImportRequest,
    MoveRequest,
    QuestionRequest,
)
from src.core.errors import GameError, NoQuestionsAvailable, PersistenceError, StateError
from src.core.event_bus import EventBus
from src.core.event_types import GameEvent
from src.core.game import GameSession
from src.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/game", tags=["game"])


async def get_game_session(request: Request) -> GameSession:
    """GameSession 인스턴스 반환 (의존성 주입)"""
    session: GameSession | None = getattr(request.app.state, "game_session", None)
    if session is None:
        raise RuntimeError("Game session not initialized")
    return session


@contextmanager
def record_events(bus: EventBus) -> Iterator[list[GameEvent]]:
    """명령 하나가 발행한 이벤트를 발행 순서대로 수집"""
    events: list[GameEvent] = []
    handler = events.append
    bus.subscribe_all(handler)
    try:
        yield events
    finally:
        bus.unsubscribe_all(handler)


def _status_for(error: GameError) -> int:
    if isinstance(error, NoQuestionsAvailable):
        return 404
    if isinstance(error, PersistenceError):
        return 422
    if isinstance(error, StateError):
        return 409
    return 400


# 명령 라우트 공통 에러 응답 (OpenAPI 문서용)
COMMAND_ERRORS: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in (400, 404, 409, 422)
}


def _error_response(error: GameError) -> JSONResponse:
    body = ErrorResponse(error=error.kind, detail=str(error))
    return JSONResponse(status_code=_status_for(error), content=body.model_dump())


def _run_command(
    game: GameSession, action: Callable[[], Any]
) -> CommandResponse | JSONResponse:
    """명령 실행 → 이벤트 수집 → 응답. GameError는 ErrorResponse로 변환."""
    with record_events(game.bus) as events:
        try:
            result = action()
        except GameError as e:
            return _error_response(e)

    return CommandResponse(
        success=True,
        result=result,
        events=[
            EventInfo(**event.to_dict())
            for event in events
            if event.event_type != "timer_tick"
        ],
        state=game.state_view(),
    )


# === 조회 ===


@router.get("/state")
async def get_state(game: GameSession = Depends(get_game_session)) -> dict[str, Any]:
    """현재 방, 해금/방문 목록, 점수, 진행 중 문제"""
    return game.state_view()


@router.get("/statistics")
async def get_statistics(
    game: GameSession = Depends(get_game_session),
) -> dict[str, Any]:
    """누적 통계 리포트 (정확도, 성취 등급, 카테고리별 분석)"""
    return game.statistics_report()


@router.get("/achievements")
async def get_achievements(
    game: GameSession = Depends(get_game_session),
) -> list[dict[str, Any]]:
    """전체 업적 목록 + 해금 여부 + 진행도"""
    return game.achievement_overview()


@router.get("/slots", responses=COMMAND_ERRORS)
async def list_slots(
    game: GameSession = Depends(get_game_session),
) -> list[dict[str, Any]]:
    """저장된 세이브 슬롯 목록 (슬롯 id, 점수, 저장 시각)"""
    try:
        return game.list_slots()
    except GameError as e:
        return _error_response(e)


@router.get("/export")
async def export_snapshot(
    game: GameSession = Depends(get_game_session),
) -> dict[str, Any]:
    """현재 진행 상태 스냅샷 (버전 포함)"""
    return game.export_snapshot()


# === 명령 ===


@router.post("/move", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def move(
    request: MoveRequest, game: GameSession = Depends(get_game_session)
) -> CommandResponse:
    """해금된 방으로 이동"""
    return _run_command(game, lambda: game.move_to_room(request.room_id).room_id)


@router.post("/question", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def request_question(
    request: QuestionRequest | None = None,
    game: GameSession = Depends(get_game_session),
) -> CommandResponse:
    """현재 방(또는 지정한 해금된 방)에서 새 문제"""
    room_id = request.room_id if request else None
    return _run_command(
        game, lambda: game.request_question(room_id).to_public_dict()
    )


@router.post("/answer", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def submit_answer(
    request: AnswerRequest, game: GameSession = Depends(get_game_session)
) -> CommandResponse:
    """진행 중인 문제에 응답"""
    return _run_command(
        game, lambda: _outcome_dict(game.submit_answer(request.option_index))
    )


@router.post("/skip", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def skip(game: GameSession = Depends(get_game_session)) -> CommandResponse:
    """문제 건너뛰기 (감점)"""
    return _run_command(game, lambda: _outcome_dict(game.skip()))


@router.post("/hint", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def request_hint(game: GameSession = Depends(get_game_session)) -> CommandResponse:
    """힌트 요청 (문제당 1회, 시간 보너스 포기)"""
    return _run_command(game, lambda: {"hint": game.request_hint()})


@router.post("/pause", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def pause(game: GameSession = Depends(get_game_session)) -> CommandResponse:
    return _run_command(game, game.pause)


@router.post("/resume", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def resume(game: GameSession = Depends(get_game_session)) -> CommandResponse:
    return _run_command(game, game.resume)


@router.post("/save", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def save(game: GameSession = Depends(get_game_session)) -> CommandResponse:
    return _run_command(game, lambda: {"slot": game.slot, "saved": bool(game.save())})


@router.post("/load", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def load(game: GameSession = Depends(get_game_session)) -> CommandResponse:
    """저장 슬롯 복원. 손상된 저장은 새 게임으로 대체되고 loaded=false."""
    return _run_command(game, lambda: {"slot": game.slot, "loaded": game.load()})


@router.post("/import", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def import_snapshot(
    request: ImportRequest, game: GameSession = Depends(get_game_session)
) -> CommandResponse:
    return _run_command(game, lambda: game.import_snapshot(request.snapshot))


@router.post("/reset", response_model=CommandResponse, responses=COMMAND_ERRORS)
async def reset(game: GameSession = Depends(get_game_session)) -> CommandResponse:
    """새 게임 시작 (저장 슬롯 삭제)"""
    return _run_command(game, game.reset)


def _outcome_dict(outcome) -> dict[str, Any]:
    return {
        "question_id": outcome.question_id,
        "correct": outcome.correct,
        "points": outcome.points,
        "time_bonus": outcome.time_bonus,
        "time_taken": round(outcome.time_taken, 3),
        "skipped": outcome.skipped,
        "timed_out": outcome.timed_out,
        "hint_used": outcome.hint_used,
    }
