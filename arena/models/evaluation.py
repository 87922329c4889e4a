from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlalchemy.types import Text
from sqlmodel import Field

from arena.models.base import BaseModel, JSONType


class EvaluationStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class Evaluation(BaseModel, table=True):
    """
    제출에 대한 채점 실행
    - 채점기가 보내는 이벤트는 EvaluationEvent 로 누적
    - PENDING 상태에서만 이벤트 추가 가능
    """

    __tablename__ = "evaluations"

    evaluation_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="채점 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    submission_id: int = Field(
        foreign_key="submissions.submission_id",
        nullable=False,
        index=True,
        description="채점 대상 제출 ID",
    )

    status: EvaluationStatus = Field(
        default=EvaluationStatus.PENDING,
        description="채점 상태",
    )

    error: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="채점 실패 사유",
    )

    completed_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
        description="채점 완료 시각(UTC)",
    )

    @property
    def is_pending(self) -> bool:
        return self.status == EvaluationStatus.PENDING


class EvaluationEvent(BaseModel, table=True):
    """
    채점 이벤트 (채점기 고유 포맷의 JSON 그대로 보관)
    - event_id 순서가 곧 도착 순서
    """

    __tablename__ = "evaluation_events"

    event_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    evaluation_id: int = Field(
        foreign_key="evaluations.evaluation_id",
        nullable=False,
        index=True,
    )

    data: dict = Field(
        default_factory=dict,
        description="이벤트 데이터 (JSON)",
        sa_column=Column(JSONType, nullable=False),
    )
