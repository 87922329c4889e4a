"""
채점 이벤트 분류 (task-maker 포맷)

채점기가 보내는 이벤트는 최상위 키 하나가 이벤트 종류를 나타내는 JSON 객체입니다.
    {"IOIEvaluation": {...}}, {"IOITestcaseScore": {...}},
    {"IOISubtaskScore": {...}}, {"Compilation": {...}}
알 수 없는 종류는 UnknownEvent 로 보관하고 집계에서는 무시합니다.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, Optional, Union

from pydantic import BaseModel, BeforeValidator, Field, ValidationError

from arena.core.exceptions import InvalidEventError

logger = logging.getLogger(__name__)


class ExecutionResources(BaseModel):
    """실행 자원 사용량 (시간: 초, 메모리: KiB)"""
    cpu_time: float = 0.0
    sys_time: float = 0.0
    wall_time: float = 0.0
    memory: int = 0


class ExecutionResult(BaseModel):
    status: Any = Field(description="실행 결과 상태 (채점기 고유 포맷)")
    was_killed: bool = False
    was_cached: bool = False
    resources: ExecutionResources = Field(default_factory=ExecutionResources)

    @property
    def is_success(self) -> bool:
        return self.status == "Success"


class ExecutionState(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SKIPPED = "SKIPPED"
    DONE = "DONE"


class ExecutionStatus(BaseModel):
    """
    실행 진행 상태
    - "Pending" / "Skipped" / {"Started": {...}} / {"Done": {"result": {...}}}
    """
    state: ExecutionState
    result: Optional[ExecutionResult] = None

    @classmethod
    def parse(cls, raw: Any) -> "ExecutionStatus":
        if isinstance(raw, ExecutionStatus):
            return raw
        if raw == "Pending":
            return cls(state=ExecutionState.PENDING)
        if raw == "Skipped":
            return cls(state=ExecutionState.SKIPPED)
        if isinstance(raw, dict) and len(raw) == 1:
            (key, value), = raw.items()
            if key == "Started":
                return cls(state=ExecutionState.RUNNING)
            if key == "Done":
                if not isinstance(value, dict) or "result" not in value:
                    raise ValueError("Done status without result")
                return cls(state=ExecutionState.DONE, result=ExecutionResult.model_validate(value["result"]))
        raise ValueError(f"unknown execution status: {raw!r}")


# 채점기 원시 포맷을 그대로 받아 ExecutionStatus 로 변환
ParsedExecutionStatus = Annotated[ExecutionStatus, BeforeValidator(ExecutionStatus.parse)]


class IOIEvaluationEvent(BaseModel):
    """테스트케이스 하나의 실행 진행 상황"""
    kind: ClassVar[str] = "IOIEvaluation"

    subtask: int
    testcase: int
    solution: str = ""
    status: ParsedExecutionStatus


class IOITestcaseScoreEvent(BaseModel):
    """테스트케이스 하나의 점수 (0 ~ 1)"""
    kind: ClassVar[str] = "IOITestcaseScore"

    subtask: int
    testcase: int
    solution: str = ""
    score: float
    message: str = ""


class IOISubtaskScoreEvent(BaseModel):
    """서브태스크 점수 (normalized_score: 0 ~ 1)"""
    kind: ClassVar[str] = "IOISubtaskScore"

    subtask: int
    solution: str = ""
    normalized_score: float
    score: float


class CompilationEvent(BaseModel):
    """소스 파일 컴파일 진행 상황"""
    kind: ClassVar[str] = "Compilation"

    file: str
    status: ParsedExecutionStatus


class UnknownEvent(BaseModel):
    kind: str
    payload: Any = None


GradingEvent = Union[
    IOIEvaluationEvent,
    IOITestcaseScoreEvent,
    IOISubtaskScoreEvent,
    CompilationEvent,
    UnknownEvent,
]

EVENT_TYPES: Dict[str, type] = {
    event_type.kind: event_type
    for event_type in (IOIEvaluationEvent, IOITestcaseScoreEvent, IOISubtaskScoreEvent, CompilationEvent)
}


def parse_event(data: Any) -> GradingEvent:
    """
    원시 이벤트 데이터를 타입이 있는 이벤트로 변환합니다.

    Args:
        data: 채점기가 보낸 JSON 객체 (최상위 키 1개)

    Returns:
        GradingEvent

    Raises:
        InvalidEventError: 최상위 키가 1개가 아니거나, 알려진 이벤트의 필드가 잘못된 경우
    """
    if not isinstance(data, dict) or len(data) != 1:
        raise InvalidEventError(f"이벤트는 최상위 키가 하나인 객체여야 합니다: {data!r}")

    (kind, payload), = data.items()
    event_type = EVENT_TYPES.get(kind)
    if event_type is None:
        logger.debug(f"알 수 없는 채점 이벤트: {kind}")
        return UnknownEvent(kind=kind, payload=payload)

    try:
        return event_type.model_validate(payload)
    except ValidationError as e:
        raise InvalidEventError(f"{kind} 이벤트 형식 오류: {e}") from e


def describe_execution_status(status: Any) -> str:
    """실행 결과 상태를 사람이 읽을 수 있는 문자열로 변환"""
    if status == "Success":
        return "Success"
    if status in ("TimeLimitExceeded", "SysTimeLimitExceeded"):
        return "Time limit exceeded"
    if status == "WallTimeLimitExceeded":
        return "Wall time limit exceeded"
    if status == "MemoryLimitExceeded":
        return "Memory limit exceeded"
    if status == "InternalError":
        return "Internal error"
    if isinstance(status, dict) and len(status) == 1:
        (key, value), = status.items()
        if key == "ReturnCode":
            return f"Exited with code {value}"
        if key == "Signal":
            if isinstance(value, (list, tuple)) and len(value) == 2:
                return f"Killed by signal {value[0]} ({value[1]})"
            return f"Killed by signal {value}"
        if key == "InternalError":
            return f"Internal error: {value}"
    return str(status)
