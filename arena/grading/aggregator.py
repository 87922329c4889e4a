"""
채점 이벤트 집계기

이벤트 스트림을 도착 순서대로 접어서(fold) 채점 요약(EvaluationSummary)을 만듭니다.
- 같은 키(파일 / 테스트케이스 / 서브태스크)에 대한 이후 이벤트가 이전 값을 덮어씀
- 같은 테스트케이스의 실행 정보와 점수 정보는 하나의 항목으로 합쳐짐
- 알 수 없는 이벤트는 요약에 영향을 주지 않음
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from arena.core.exceptions import InvalidEventError

from arena.grading.events import (
    CompilationEvent,
    ExecutionState,
    ExecutionStatus,
    GradingEvent,
    IOIEvaluationEvent,
    IOISubtaskScoreEvent,
    IOITestcaseScoreEvent,
    UnknownEvent,
    describe_execution_status,
    parse_event,
)

logger = logging.getLogger(__name__)


class CompilationState(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


@dataclass(frozen=True)
class CompilationOutcome:
    file: str
    state: CompilationState
    message: Optional[str] = None


@dataclass(frozen=True)
class TestcaseOutcome:
    """테스트케이스 하나의 실행 / 점수 정보"""
    __test__ = False  # pytest 수집 대상 아님

    subtask: int
    testcase: int
    state: ExecutionState = ExecutionState.PENDING
    execution_message: Optional[str] = None
    cpu_time: Optional[float] = None
    wall_time: Optional[float] = None
    memory: Optional[int] = None
    score: Optional[float] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class SubtaskOutcome:
    subtask: int
    score: float
    normalized_score: float


@dataclass(frozen=True)
class EvaluationSummary:
    """채점 요약 (불변)"""
    compilations: Tuple[CompilationOutcome, ...] = ()
    testcases: Tuple[TestcaseOutcome, ...] = ()
    subtasks: Dict[int, SubtaskOutcome] = field(default_factory=dict)
    event_count: int = 0

    @property
    def compilation_failed(self) -> bool:
        return any(c.state == CompilationState.FAILED for c in self.compilations)

    @property
    def compilation_message(self) -> Optional[str]:
        for c in self.compilations:
            if c.state == CompilationState.FAILED:
                return c.message
        return None

    @property
    def total_score(self) -> float:
        return sum(s.score for s in self.subtasks.values())

    def subtask(self, index: int) -> Optional[SubtaskOutcome]:
        return self.subtasks.get(index)


def _compilation_outcome(file: str, status: ExecutionStatus) -> CompilationOutcome:
    if status.state == ExecutionState.DONE:
        result = status.result
        if result is not None and result.is_success:
            return CompilationOutcome(file=file, state=CompilationState.SUCCESS)
        message = describe_execution_status(result.status) if result is not None else None
        return CompilationOutcome(file=file, state=CompilationState.FAILED, message=message)
    if status.state == ExecutionState.RUNNING:
        return CompilationOutcome(file=file, state=CompilationState.RUNNING)
    if status.state == ExecutionState.SKIPPED:
        return CompilationOutcome(file=file, state=CompilationState.FAILED, message="Skipped")
    return CompilationOutcome(file=file, state=CompilationState.PENDING)


class EvaluationAggregator:
    """
    채점 이벤트를 점진적으로 집계

    사용 예:
        aggregator = EvaluationAggregator()
        for data in raw_events:
            aggregator.apply_raw(data)
        summary = aggregator.summary()
    """

    def __init__(self):
        self._compilations: Dict[str, CompilationOutcome] = {}
        self._testcases: Dict[Tuple[int, int], TestcaseOutcome] = {}
        self._subtasks: Dict[int, SubtaskOutcome] = {}
        self._event_count = 0

    def apply(self, event: GradingEvent) -> None:
        """이벤트 하나를 반영합니다. (알 수 없는 이벤트는 개수에도 포함하지 않음)"""
        if isinstance(event, UnknownEvent):
            logger.debug(f"집계 대상이 아닌 이벤트 무시: {event.kind}")
            return
        self._event_count += 1

        if isinstance(event, CompilationEvent):
            self._compilations[event.file] = _compilation_outcome(event.file, event.status)

        elif isinstance(event, IOIEvaluationEvent):
            current = self._testcase(event.subtask, event.testcase)
            result = event.status.result
            if result is not None:
                current = replace(
                    current,
                    state=event.status.state,
                    execution_message=describe_execution_status(result.status),
                    cpu_time=result.resources.cpu_time,
                    wall_time=result.resources.wall_time,
                    memory=result.resources.memory,
                )
            else:
                current = replace(current, state=event.status.state)
            self._testcases[(event.subtask, event.testcase)] = current

        elif isinstance(event, IOITestcaseScoreEvent):
            current = self._testcase(event.subtask, event.testcase)
            self._testcases[(event.subtask, event.testcase)] = replace(
                current, score=event.score, message=event.message,
            )

        elif isinstance(event, IOISubtaskScoreEvent):
            self._subtasks[event.subtask] = SubtaskOutcome(
                subtask=event.subtask,
                score=event.score,
                normalized_score=event.normalized_score,
            )

    def apply_raw(self, data: dict) -> GradingEvent:
        """원시 이벤트 데이터를 파싱 후 반영합니다."""
        event = parse_event(data)
        self.apply(event)
        return event

    def apply_all(self, events: Iterable[GradingEvent]) -> "EvaluationAggregator":
        for event in events:
            self.apply(event)
        return self

    def summary(self) -> EvaluationSummary:
        return EvaluationSummary(
            compilations=tuple(self._compilations.values()),
            testcases=tuple(self._testcases[key] for key in sorted(self._testcases)),
            subtasks=dict(sorted(self._subtasks.items())),
            event_count=self._event_count,
        )

    def _testcase(self, subtask: int, testcase: int) -> TestcaseOutcome:
        return self._testcases.get(
            (subtask, testcase), TestcaseOutcome(subtask=subtask, testcase=testcase)
        )


def summarize(raw_events: Iterable[dict]) -> EvaluationSummary:
    """
    DB 에 저장된 원시 이벤트 목록을 요약합니다.
    형식이 잘못된 이벤트는 경고 로그를 남기고 건너뜁니다.
    """
    aggregator = EvaluationAggregator()
    for data in raw_events:
        try:
            aggregator.apply_raw(data)
        except InvalidEventError as e:
            logger.warning(f"잘못된 채점 이벤트 건너뜀: {e.message}")
    return aggregator.summary()
