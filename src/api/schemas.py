"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class MoveRequest(BaseModel):
    """방 이동 요청"""

    room_id: str = Field(..., min_length=1, description="이동할 방 ID")


class QuestionRequest(BaseModel):
    """문제 요청. room_id 생략 시 현재 방."""

    room_id: Optional[str] = Field(None, description="문제를 낼 방 ID")


class AnswerRequest(BaseModel):
    """응답 제출"""

    option_index: int = Field(..., ge=0, description="선택한 보기 인덱스 (0부터)")


class ImportRequest(BaseModel):
    """외부 스냅샷 가져오기"""

    snapshot: dict[str, Any]


# === Response Schemas ===


class EventInfo(BaseModel):
    """명령이 발행한 이벤트 1건"""

    type: str
    data: dict[str, Any] = {}


class CommandResponse(BaseModel):
    """명령 응답: 결과 + 발행된 이벤트 (발행 순서)"""

    success: bool = True
    result: Optional[Any] = None
    events: list[EventInfo] = []
    state: dict[str, Any] = {}


class ErrorResponse(BaseModel):
    """에러 응답"""

    success: bool = False
    error: str
    detail: Optional[str] = None
