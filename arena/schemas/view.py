"""
화면용 뷰 스키마

클라이언트는 MainView 를 주기적으로 폴링하며, 채점 중인 제출이 있으면
poll_interval_ms 가 짧아집니다.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from arena.grading.awards import (
    AwardDefinition,
    BestBadgeAward,
    GradeField,
    MaxScoreAward,
    ScoreField,
    ScoreRange,
)
from arena.grading.feedback import SummaryRow, TitledColumn
from arena.schemas.contest import ContestResponse, FileResponse
from arena.schemas.types import UtcDatetime
from arena.schemas.user import UserResponse


class SubmissionSummary(BaseModel):
    """제출 목록의 한 줄"""
    submission_id: int
    created_at: Optional[UtcDatetime] = None
    pending: bool
    evaluation_status: Optional[str] = None
    summary: SummaryRow


class PendingSubmission(BaseModel):
    submission_id: int
    problem: str
    created_at: Optional[UtcDatetime] = None


class ProblemTacklingView(BaseModel):
    """사용자 한 명의 문제 풀이 현황"""
    username: str
    submissions: List[SubmissionSummary]
    best_awards: List[Union[MaxScoreAward, BestBadgeAward]]
    total_score: ScoreField
    can_submit: bool


class AwardView(BaseModel):
    award: AwardDefinition
    grade: Optional[GradeField] = Field(None, description="사용자의 최고 결과 (익명이면 None)")


class ProblemView(BaseModel):
    name: str
    title: str
    submission_fields: List[str]
    files: List[FileResponse]
    total_score_range: ScoreRange
    total_score: Optional[ScoreField] = None
    awards: List[AwardView]
    submission_list_columns: List[TitledColumn]
    tackling: Optional[ProblemTacklingView] = None


class ProblemSetView(BaseModel):
    problems: List[ProblemView]
    total_score_range: ScoreRange
    total_score: Optional[ScoreField] = None


class ContestView(BaseModel):
    contest: ContestResponse
    user: Optional[UserResponse] = None
    files: List[FileResponse]
    problem_set: Optional[ProblemSetView] = Field(None, description="대회 시작 전에는 None")


class MainView(BaseModel):
    user: Optional[UserResponse] = None
    title: str
    contest_view: Optional[ContestView] = None
    pending_submissions: List[PendingSubmission]
    poll_interval_ms: int


class ServerTimeResponse(BaseModel):
    now: str = Field(..., description="서버 시각 (RFC 3339, UTC)")
