from typing import Optional

from sqlmodel import Field

from arena.models.base import BaseModel


class Submission(BaseModel, table=True):
    """
    참가자의 풀이 제출
    - 하나 이상의 SubmissionFile 로 구성
    - 채점 결과는 Evaluation 에 저장 (가장 최근 Evaluation 이 공식 결과)
    """

    __tablename__ = "submissions"

    submission_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="제출 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    contest_id: int = Field(
        foreign_key="contests.contest_id",
        nullable=False,
        index=True,
        description="대회 ID",
    )

    problem_id: int = Field(
        foreign_key="problems.problem_id",
        nullable=False,
        index=True,
        description="문제 ID",
    )

    user_id: int = Field(
        foreign_key="users.user_id",
        nullable=False,
        index=True,
        description="제출한 사용자 ID",
    )


class SubmissionFile(BaseModel, table=True):
    """
    제출 파일
    - field_id: 문제의 제출 필드 (예: "solution")
    - file_name: 사용자가 올린 파일 이름 (확장자로 언어 판별)
    """

    __tablename__ = "submission_files"

    submission_file_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"autoincrement": True},
    )

    submission_id: int = Field(
        foreign_key="submissions.submission_id",
        nullable=False,
        index=True,
    )

    field_id: str = Field(
        max_length=100,
        nullable=False,
        description="제출 필드 ID",
    )

    file_name: str = Field(
        max_length=255,
        nullable=False,
        description="파일 이름",
    )

    content_id: int = Field(
        foreign_key="file_contents.content_id",
        nullable=False,
    )
