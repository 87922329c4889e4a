"""
채점 항목(award)과 점수 표현

- AwardDefinition: 문제에 정의된 채점 항목 (i 번째 항목 = 채점기의 subtask i)
- ScoreRange: 점수 범위 (최대 점수, 소수 자릿수, 부분 점수 허용 여부)
- ScoreField / FulfillmentField: 화면에 표시되는 점수 / 달성 여부 필드 (valence 포함)
- MaxScoreAward / BestBadgeAward: 여러 제출 중 최고 결과
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field

from arena.grading.aggregator import EvaluationSummary


class AwardKind(str, Enum):
    SCORE = "SCORE"
    BADGE = "BADGE"


class Valence(str, Enum):
    """결과의 긍정/부정 정도 (클라이언트에서 색상 표시에 사용)"""
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILURE = "FAILURE"
    NOMINAL = "NOMINAL"


class ScoreRange(BaseModel):
    precision: int = Field(default=0, ge=0, description="소수 자릿수")
    max: float = Field(default=0.0, ge=0, description="최대 점수")
    allow_partial: bool = Field(default=True, description="부분 점수 허용 여부 (False 면 0 또는 max)")

    @classmethod
    def total(cls, ranges: Iterable["ScoreRange"]) -> "ScoreRange":
        """여러 범위의 합 (최대 점수 합, 가장 큰 자릿수, 하나라도 부분 점수를 허용하면 허용)"""
        ranges = list(ranges)
        return cls(
            precision=max((r.precision for r in ranges), default=0),
            max=sum(r.max for r in ranges),
            allow_partial=any(r.allow_partial for r in ranges),
        )


class AwardDefinition(BaseModel):
    name: str = Field(description="채점 항목 식별 이름 (관리자용)")
    title: Optional[str] = Field(default=None, description="화면 표시 이름")
    kind: AwardKind = AwardKind.SCORE
    max_score: float = Field(default=0.0, ge=0)
    precision: int = Field(default=0, ge=0)
    allow_partial: bool = True

    @property
    def display_title(self) -> str:
        return self.title or self.name

    @property
    def range(self) -> ScoreRange:
        return ScoreRange(precision=self.precision, max=self.max_score, allow_partial=self.allow_partial)


def round_score(score: float, precision: int) -> float:
    return round(score, precision)


def score_valence(score: Optional[float], score_range: ScoreRange) -> Optional[Valence]:
    if score is None:
        return None
    if score_range.max <= 0:
        return Valence.NOMINAL
    if score >= score_range.max:
        return Valence.SUCCESS
    if score <= 0 or not score_range.allow_partial:
        return Valence.FAILURE
    return Valence.PARTIAL


def fulfillment_valence(fulfilled: Optional[bool]) -> Optional[Valence]:
    if fulfilled is None:
        return None
    return Valence.SUCCESS if fulfilled else Valence.FAILURE


class ScoreField(BaseModel):
    type: Literal["score"] = "score"
    score: Optional[float] = None
    range: ScoreRange
    valence: Optional[Valence] = None

    @classmethod
    def of(cls, score: Optional[float], score_range: ScoreRange) -> "ScoreField":
        if score is not None:
            score = round_score(score, score_range.precision)
        return cls(score=score, range=score_range, valence=score_valence(score, score_range))


class FulfillmentField(BaseModel):
    type: Literal["fulfillment"] = "fulfillment"
    fulfilled: Optional[bool] = None
    valence: Optional[Valence] = None

    @classmethod
    def of(cls, fulfilled: Optional[bool]) -> "FulfillmentField":
        return cls(fulfilled=fulfilled, valence=fulfillment_valence(fulfilled))


GradeField = Union[ScoreField, FulfillmentField]


def parse_awards(raw_awards: Sequence[dict]) -> List[AwardDefinition]:
    """Problem.awards JSON 을 AwardDefinition 목록으로 변환"""
    return [AwardDefinition.model_validate(raw) for raw in raw_awards or []]


def problem_score_range(awards: Sequence[AwardDefinition]) -> ScoreRange:
    """문제 전체 점수 범위 (SCORE 항목만 합산)"""
    return ScoreRange.total(a.range for a in awards if a.kind == AwardKind.SCORE)


def award_outcome(award: AwardDefinition, summary: EvaluationSummary, subtask_index: int) -> Union[float, bool, None]:
    """
    채점 요약에서 채점 항목 하나의 결과를 구합니다.

    Returns:
        SCORE 항목: 서브태스크 점수 (아직 채점되지 않았으면 None)
        BADGE 항목: normalized_score >= 1 이면 True (아직 채점되지 않았으면 None)
    """
    subtask = summary.subtask(subtask_index)
    if subtask is None:
        return None
    if award.kind == AwardKind.BADGE:
        return subtask.normalized_score >= 1.0
    return subtask.score


def grade_field(award: AwardDefinition, outcome: Union[float, bool, None]) -> GradeField:
    if award.kind == AwardKind.BADGE:
        return FulfillmentField.of(outcome)
    return ScoreField.of(outcome, award.range)


class MaxScoreAward(BaseModel):
    """여러 제출 중 최고 점수"""
    award_name: str
    score: float = 0.0
    submission_id: Optional[int] = None


class BestBadgeAward(BaseModel):
    """여러 제출 중 하나라도 달성했는지"""
    award_name: str
    badge: bool = False
    submission_id: Optional[int] = None
