"""
화면용 뷰 조립

공식 채점(가장 최근 채점)의 이벤트를 읽을 때마다 집계해서
MainView / ContestView / ProblemView 를 만듭니다.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.config import settings
from arena.grading.aggregator import EvaluationSummary, summarize
from arena.grading.awards import ScoreField, ScoreRange, parse_awards, problem_score_range
from arena.grading.feedback import (
    best_awards,
    best_grade_fields,
    submission_list_columns,
    summary_row,
    total_best_score,
)
from arena.models.contest import Contest
from arena.models.evaluation import Evaluation
from arena.models.problem import Problem
from arena.models.submission import Submission
from arena.models.user import User
from arena.repositories.contest import ContestRepository
from arena.repositories.evaluation import EvaluationRepository
from arena.repositories.problem import ProblemRepository
from arena.repositories.submission import SubmissionRepository
from arena.schemas import (
    AwardView,
    ContestStatus,
    ContestView,
    FileResponse,
    MainView,
    PendingSubmission,
    ProblemSetView,
    ProblemTacklingView,
    ProblemView,
    SubmissionSummary,
    UserResponse,
)
from arena.services.contest_service import contest_status, to_contest_response
from arena.utils.datetime import utc_now

logger = logging.getLogger(__name__)


@dataclass
class OfficialResult:
    """제출 하나의 공식 채점과 그 요약"""
    evaluation: Optional[Evaluation]
    summary: Optional[EvaluationSummary]

    @property
    def pending(self) -> bool:
        return self.evaluation is None or self.evaluation.is_pending


def poll_interval_ms(pending_count: int) -> int:
    """채점 중인 제출이 있으면 짧게, 없으면 길게"""
    if pending_count > 0:
        return settings.POLL_INTERVAL_PENDING_MS
    return settings.POLL_INTERVAL_IDLE_MS


class ViewService:

    def __init__(self):
        self.contest_repo = ContestRepository()
        self.problem_repo = ProblemRepository()
        self.submission_repo = SubmissionRepository()
        self.evaluation_repo = EvaluationRepository()

    async def official_results(
        self, db: AsyncSession, submissions: Sequence[Submission]
    ) -> Dict[int, OfficialResult]:
        """submission_id → 공식 채점 결과 (채점이 없으면 evaluation / summary 모두 None)"""
        ids = [s.submission_id for s in submissions]
        officials = await self.evaluation_repo.get_official_map(db, ids)
        events = await self.evaluation_repo.list_event_data_map(
            db, [e.evaluation_id for e in officials.values()]
        )

        results = {}
        for submission_id in ids:
            evaluation = officials.get(submission_id)
            if evaluation is None:
                results[submission_id] = OfficialResult(evaluation=None, summary=None)
            else:
                summary = summarize(events.get(evaluation.evaluation_id, []))
                results[submission_id] = OfficialResult(evaluation=evaluation, summary=summary)
        return results

    # -------------------- #
    # 문제
    # -------------------- #

    async def problem_tackling(
        self,
        db: AsyncSession,
        contest: Contest,
        problem: Problem,
        user: User,
        now: Optional[datetime] = None,
    ) -> ProblemTacklingView:
        """
        사용자의 문제 풀이 현황
        - 제출 목록 (최신순)
        - 채점 항목별 최고 결과 (동점이면 먼저 달성한 제출)
        - can_submit: 대회 진행 중이고 참가자인 경우
        """
        awards = parse_awards(problem.awards)
        submissions = await self.submission_repo.list_by_user_and_problem(
            db, contest_id=contest.contest_id, user_id=user.user_id, problem_id=problem.problem_id
        )
        results = await self.official_results(db, submissions)

        rows = []
        for submission in submissions:
            result = results[submission.submission_id]
            rows.append(SubmissionSummary(
                submission_id=submission.submission_id,
                created_at=submission.created_at,
                pending=result.pending,
                evaluation_status=result.evaluation.status.value if result.evaluation else None,
                summary=summary_row(awards, result.summary),
            ))

        # 최고 결과는 오래된 제출부터 훑음
        graded = [
            (s.submission_id, results[s.submission_id].summary)
            for s in reversed(submissions)
            if results[s.submission_id].summary is not None
        ]
        best = best_awards(awards, graded)
        total = total_best_score(best) if any(b.submission_id is not None for b in best) else None

        can_submit = (
            contest_status(contest, now) == ContestStatus.RUNNING
            and await self.contest_repo.is_participant(db, contest.contest_id, user.user_id)
        )

        return ProblemTacklingView(
            username=user.username,
            submissions=rows,
            best_awards=best,
            total_score=ScoreField.of(total, problem_score_range(awards)),
            can_submit=can_submit,
        )

    async def problem_view(
        self,
        db: AsyncSession,
        contest: Contest,
        problem: Problem,
        user: Optional[User],
        now: Optional[datetime] = None,
    ) -> ProblemView:
        awards = parse_awards(problem.awards)
        files = [
            FileResponse(path=f.path, hash=content.hash, media_type=content.media_type)
            for f, content in await self.problem_repo.list_files(db, problem.problem_id)
        ]

        tackling = None
        grades: list = [None] * len(awards)
        if user is not None:
            tackling = await self.problem_tackling(db, contest, problem, user, now)
            grades = best_grade_fields(awards, tackling.best_awards)

        return ProblemView(
            name=problem.name,
            title=problem.display_title,
            submission_fields=list(problem.submission_fields),
            files=files,
            total_score_range=problem_score_range(awards),
            total_score=tackling.total_score if tackling else None,
            awards=[AwardView(award=award, grade=grade) for award, grade in zip(awards, grades)],
            submission_list_columns=submission_list_columns(awards),
            tackling=tackling,
        )

    async def problem_set_view(
        self,
        db: AsyncSession,
        contest: Contest,
        user: Optional[User],
        now: Optional[datetime] = None,
    ) -> ProblemSetView:
        problems = await self.contest_repo.list_problems(db, contest.contest_id)
        views = [await self.problem_view(db, contest, p, user, now) for p in problems]

        total_range = ScoreRange.total(v.total_score_range for v in views)
        total_score = None
        if user is not None:
            scores = [v.tackling.total_score.score for v in views if v.tackling]
            graded_scores = [s for s in scores if s is not None]
            total_score = ScoreField.of(sum(graded_scores) if graded_scores else None, total_range)

        return ProblemSetView(problems=views, total_score_range=total_range, total_score=total_score)

    # -------------------- #
    # 대회 / 메인
    # -------------------- #

    async def contest_view(
        self,
        db: AsyncSession,
        contest: Contest,
        user: Optional[User],
        now: Optional[datetime] = None,
    ) -> ContestView:
        """대회 뷰 (시작 전에는 문제 목록을 공개하지 않음)"""
        now = now or utc_now()
        files = [
            FileResponse(path=f.path, hash=content.hash, media_type=content.media_type)
            for f, content in await self.contest_repo.list_files(db, contest.contest_id)
        ]

        problem_set = None
        if contest_status(contest, now) != ContestStatus.NOT_STARTED:
            problem_set = await self.problem_set_view(db, contest, user, now)

        return ContestView(
            contest=to_contest_response(contest, now),
            user=UserResponse.model_validate(user) if user else None,
            files=files,
            problem_set=problem_set,
        )

    async def pending_submissions(self, db: AsyncSession, contest: Contest, user: User) -> List[PendingSubmission]:
        submissions = await self.submission_repo.list_by_contest_and_user(
            db, contest_id=contest.contest_id, user_id=user.user_id
        )
        officials = await self.evaluation_repo.get_official_map(db, [s.submission_id for s in submissions])

        problem_names: Dict[int, str] = {}
        pending = []
        for submission in submissions:
            evaluation = officials.get(submission.submission_id)
            if evaluation is not None and not evaluation.is_pending:
                continue
            if submission.problem_id not in problem_names:
                problem = await self.problem_repo.get_by_id(db, submission.problem_id)
                problem_names[submission.problem_id] = problem.name if problem else ""
            pending.append(PendingSubmission(
                submission_id=submission.submission_id,
                problem=problem_names[submission.problem_id],
                created_at=submission.created_at,
            ))
        return pending

    async def main_view(
        self,
        db: AsyncSession,
        contest: Optional[Contest],
        user: Optional[User],
        now: Optional[datetime] = None,
    ) -> MainView:
        """
        첫 화면 뷰
        - title: 대회 제목 (없으면 기본 제목)
        - pending_submissions: 익명이면 빈 목록
        - poll_interval_ms: 채점 중인 제출이 있으면 짧은 주기
        """
        if contest is None:
            return MainView(
                user=UserResponse.model_validate(user) if user else None,
                title=settings.DEFAULT_TITLE,
                contest_view=None,
                pending_submissions=[],
                poll_interval_ms=poll_interval_ms(0),
            )

        pending = await self.pending_submissions(db, contest, user) if user is not None else []
        return MainView(
            user=UserResponse.model_validate(user) if user else None,
            title=contest.title or settings.DEFAULT_TITLE,
            contest_view=await self.contest_view(db, contest, user, now),
            pending_submissions=pending,
            poll_interval_ms=poll_interval_ms(len(pending)),
        )
