from typing import Optional

from sqlalchemy import Column, UniqueConstraint
from sqlmodel import Field

from arena.models.base import BaseModel, JSONType


class Problem(BaseModel, table=True):
    """
    문제 정보
    - awards: 채점 항목 정의 JSON (i 번째 항목 = 채점기의 subtask i)
    - submission_fields: 제출 시 받는 파일 필드 목록
    """

    __tablename__ = "problems"

    problem_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="문제 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    name: str = Field(
        max_length=100,
        nullable=False,
        description="문제 식별 이름 (관리자용)",
        sa_column_kwargs={"unique": True},
    )

    title: Optional[str] = Field(
        default=None,
        max_length=255,
        description="화면에 표시되는 문제 제목",
    )

    awards: list = Field(
        default_factory=list,
        description="채점 항목 목록 (list of {name, title, kind, max_score, precision, allow_partial})",
        sa_column=Column(JSONType, nullable=False),
    )

    submission_fields: list = Field(
        default_factory=lambda: ["solution"],
        description="제출 파일 필드 ID 목록",
        sa_column=Column(JSONType, nullable=False),
    )

    @property
    def display_title(self) -> str:
        return self.title or self.name


class ProblemFile(BaseModel, table=True):
    """
    문제 패키지 파일 (지문, 채점 데이터, 첨부 파일)
    """

    __tablename__ = "problem_files"
    __table_args__ = (
        UniqueConstraint("problem_id", "path", name="uq_problem_file_path"),
    )

    problem_file_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    problem_id: int = Field(
        foreign_key="problems.problem_id",
        nullable=False,
    )

    path: str = Field(
        max_length=255,
        nullable=False,
        description="문제 디렉토리 기준 상대 경로",
    )

    content_id: int = Field(
        foreign_key="file_contents.content_id",
        nullable=False,
    )
