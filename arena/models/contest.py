from datetime import datetime
from typing import Optional

from sqlalchemy import Column, UniqueConstraint
from sqlalchemy.types import TIMESTAMP, Text
from sqlmodel import Field

from arena.models.base import BaseModel


class Contest(BaseModel, table=True):
    """
    대회 정보
    - start_time / end_time 이 비어 있으면 항상 진행 중인 대회로 취급
    """

    __tablename__ = "contests"

    contest_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="대회 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    name: str = Field(
        max_length=100,
        nullable=False,
        description="대회 식별 이름",
        sa_column_kwargs={"unique": True},
    )

    title: Optional[str] = Field(
        default=None,
        max_length=255,
        description="화면에 표시되는 대회 제목",
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="대회 설명 (markdown)",
    )

    start_time: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="대회 시작 시각 (UTC)",
    )

    end_time: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="대회 종료 시각 (UTC)",
    )


class ContestProblem(BaseModel, table=True):
    """
    대회에 배정된 문제 (출제 순서 포함)
    """

    __tablename__ = "contest_problems"
    __table_args__ = (
        UniqueConstraint("contest_id", "problem_id", name="uq_contest_problem"),
    )

    contest_problem_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    contest_id: int = Field(
        foreign_key="contests.contest_id",
        nullable=False,
        description="대회 ID",
    )

    problem_id: int = Field(
        foreign_key="problems.problem_id",
        nullable=False,
        description="문제 ID",
    )

    position: int = Field(
        default=0,
        description="대회 내 문제 순서",
    )


class Participation(BaseModel, table=True):
    """
    대회 참가 정보 (user ↔ contest)
    """

    __tablename__ = "participations"
    __table_args__ = (
        UniqueConstraint("contest_id", "user_id", name="uq_participation"),
    )

    participation_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    contest_id: int = Field(
        foreign_key="contests.contest_id",
        nullable=False,
    )

    user_id: int = Field(
        foreign_key="users.user_id",
        nullable=False,
    )


class ContestFile(BaseModel, table=True):
    """
    대회 첨부 파일 (홈 화면 설명, 공지 등)
    """

    __tablename__ = "contest_files"
    __table_args__ = (
        UniqueConstraint("contest_id", "path", name="uq_contest_file_path"),
    )

    contest_file_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    contest_id: int = Field(
        foreign_key="contests.contest_id",
        nullable=False,
    )

    path: str = Field(
        max_length=255,
        nullable=False,
        description="대회 디렉토리 기준 상대 경로",
    )

    content_id: int = Field(
        foreign_key="file_contents.content_id",
        nullable=False,
    )
