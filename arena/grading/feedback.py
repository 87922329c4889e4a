"""
채점 요약 → 화면용 뷰 변환

- 제출 목록의 요약 행 (채점 항목별 필드 + 총점)
- 제출 상세의 피드백 표 (테스트케이스별 시간 / 메모리 / 메시지 / 점수)
- 여러 제출에 걸친 채점 항목별 최고 결과
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from arena.grading.aggregator import EvaluationSummary, TestcaseOutcome
from arena.grading.awards import (
    AwardDefinition,
    AwardKind,
    BestBadgeAward,
    GradeField,
    MaxScoreAward,
    ScoreField,
    ScoreRange,
    Valence,
    award_outcome,
    grade_field,
    problem_score_range,
    score_valence,
)

TOTAL_COLUMN_TITLE = "Total"

FEEDBACK_COLUMNS = ("Subtask", "Testcase", "Time", "Memory", "Message", "Score")

# 테스트케이스 점수 범위 (task-maker 는 0 ~ 1 로 보냄)
TESTCASE_SCORE_RANGE = ScoreRange(precision=2, max=1.0, allow_partial=True)


class TitledColumn(BaseModel):
    title: str


class SummaryRow(BaseModel):
    fields: List[GradeField]


class FeedbackRow(BaseModel):
    subtask: int
    testcase: int
    time: Optional[float] = None
    memory: Optional[int] = None
    message: Optional[str] = None
    score: Optional[float] = None
    valence: Optional[Valence] = None


class FeedbackTable(BaseModel):
    columns: List[TitledColumn]
    rows: List[FeedbackRow]
    compilation_failed: bool = False
    compilation_message: Optional[str] = None


def submission_list_columns(awards: Sequence[AwardDefinition]) -> List[TitledColumn]:
    """제출 목록 열: 채점 항목 제목들 + Total"""
    return [TitledColumn(title=a.display_title) for a in awards] + [TitledColumn(title=TOTAL_COLUMN_TITLE)]


def summary_row(awards: Sequence[AwardDefinition], summary: Optional[EvaluationSummary]) -> SummaryRow:
    """
    제출 하나의 요약 행을 만듭니다.
    summary 가 None 이면 (아직 채점 전) 모든 필드가 빈 값입니다.
    """
    fields: List[GradeField] = []
    for index, award in enumerate(awards):
        outcome = award_outcome(award, summary, index) if summary is not None else None
        fields.append(grade_field(award, outcome))

    total = None
    if summary is not None and summary.subtasks:
        total = sum(
            award_outcome(award, summary, index) or 0.0
            for index, award in enumerate(awards)
            if award.kind == AwardKind.SCORE
        )
    fields.append(ScoreField.of(total, problem_score_range(awards)))
    return SummaryRow(fields=fields)


def _feedback_row(outcome: TestcaseOutcome) -> FeedbackRow:
    message = outcome.message or outcome.execution_message
    return FeedbackRow(
        subtask=outcome.subtask,
        testcase=outcome.testcase,
        time=outcome.cpu_time,
        memory=outcome.memory,
        message=message,
        score=outcome.score,
        valence=score_valence(outcome.score, TESTCASE_SCORE_RANGE),
    )


def feedback_table(summary: Optional[EvaluationSummary]) -> FeedbackTable:
    """
    피드백 표를 만듭니다.
    컴파일에 실패한 경우 행 없이 컴파일 메시지만 채웁니다.
    """
    columns = [TitledColumn(title=title) for title in FEEDBACK_COLUMNS]
    if summary is None:
        return FeedbackTable(columns=columns, rows=[])
    if summary.compilation_failed:
        return FeedbackTable(
            columns=columns,
            rows=[],
            compilation_failed=True,
            compilation_message=summary.compilation_message,
        )
    return FeedbackTable(columns=columns, rows=[_feedback_row(t) for t in summary.testcases])


def best_awards(
    awards: Sequence[AwardDefinition],
    graded: Sequence[Tuple[int, EvaluationSummary]],
) -> List[Union[MaxScoreAward, BestBadgeAward]]:
    """
    여러 제출의 채점 요약에서 채점 항목별 최고 결과를 구합니다.

    Args:
        awards: 문제의 채점 항목 정의
        graded: (submission_id, 공식 채점 요약) 목록, 오래된 제출부터

    동점이면 먼저 달성한 제출을 유지합니다.
    """
    results: List[Union[MaxScoreAward, BestBadgeAward]] = []
    for index, award in enumerate(awards):
        if award.kind == AwardKind.BADGE:
            best_badge = BestBadgeAward(award_name=award.name)
            for submission_id, summary in graded:
                fulfilled = award_outcome(award, summary, index)
                if fulfilled is None:
                    continue
                # 달성 전까지는 처음 채점된 제출, 달성 후에는 처음 달성한 제출
                if best_badge.submission_id is None or (fulfilled and not best_badge.badge):
                    best_badge = BestBadgeAward(award_name=award.name, badge=fulfilled, submission_id=submission_id)
            results.append(best_badge)
        else:
            best_score = MaxScoreAward(award_name=award.name)
            for submission_id, summary in graded:
                score = award_outcome(award, summary, index)
                if score is None:
                    continue
                if best_score.submission_id is None or score > best_score.score:
                    best_score = MaxScoreAward(award_name=award.name, score=score, submission_id=submission_id)
            results.append(best_score)
    return results


def best_grade_fields(
    awards: Sequence[AwardDefinition],
    best: Sequence[Union[MaxScoreAward, BestBadgeAward]],
) -> List[GradeField]:
    """최고 결과를 화면용 필드로 변환 (한 번도 채점되지 않은 항목은 빈 값)"""
    fields: List[GradeField] = []
    for award, result in zip(awards, best):
        if isinstance(result, BestBadgeAward):
            outcome = result.badge if result.submission_id is not None else None
        else:
            outcome = result.score if result.submission_id is not None else None
        fields.append(grade_field(award, outcome))
    return fields


def total_best_score(best: Sequence[Union[MaxScoreAward, BestBadgeAward]]) -> float:
    """문제 점수 = 채점 항목별 최고 점수의 합"""
    return sum(b.score for b in best if isinstance(b, MaxScoreAward))
