"""
Evaluation Dispatcher
제출을 채점기에 넘기고, 채점기가 보내는 이벤트를 DB 에 순서대로 기록
"""
from __future__ import annotations

import asyncio
import logging
import tempfile
from contextlib import aclosing
from pathlib import Path
from typing import Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from arena.core.exceptions import EvaluationClosedError, InvalidEventError, NotFoundError
from arena.grading.backend import GradingBackend, TaskMakerBackend
from arena.grading.events import parse_event
from arena.models.evaluation import Evaluation, EvaluationStatus
from arena.repositories.evaluation import EvaluationRepository
from arena.repositories.problem import ProblemRepository
from arena.repositories.submission import SubmissionRepository

logger = logging.getLogger(__name__)


class EvaluationDispatcher:
    """
    채점 실행 엔진
    - submit: PENDING 채점 생성 후 백그라운드 태스크로 채점기 실행
    - 이벤트는 도착 순서대로 EvaluationEvent 로 저장
    - 채점기가 정상 종료하면 SUCCESS, 실패하면 ERROR (사유 기록)
    """

    def __init__(
        self,
        backend: Optional[GradingBackend] = None,
        session_factory: Optional[async_sessionmaker] = None,
    ):
        if session_factory is None:
            from arena.database import async_session
            session_factory = async_session

        self.backend = backend or TaskMakerBackend()
        self.session_factory = session_factory
        self.evaluation_repo = EvaluationRepository()
        self.submission_repo = SubmissionRepository()
        self.problem_repo = ProblemRepository()

        self._tasks: Set[asyncio.Task] = set()

    @property
    def running(self) -> int:
        return len(self._tasks)

    async def submit(self, db: AsyncSession, submission_id: int) -> Evaluation:
        """
        새 공식 채점을 만들고 채점을 시작합니다.
        (재채점도 같은 경로: 가장 최근 채점이 공식 채점)
        """
        submission = await self.submission_repo.get_by_id(db, submission_id)
        if not submission:
            raise NotFoundError(f"제출을 찾을 수 없습니다: {submission_id}")

        evaluation = await self.evaluation_repo.create(db, submission_id)

        task = asyncio.create_task(
            self._run(evaluation.evaluation_id, submission_id, submission.problem_id),
            name=f"evaluation-{evaluation.evaluation_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return evaluation

    async def reevaluate(self, db: AsyncSession, submission_id: int) -> Evaluation:
        logger.info(f"재채점 요청: submission_id={submission_id}")
        return await self.submit(db, submission_id)

    async def join(self) -> None:
        """실행 중인 채점이 모두 끝날 때까지 대기"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """실행 중인 채점 태스크 취소 (앱 종료 시)"""
        if not self._tasks:
            return
        logger.info(f"실행 중인 채점 {len(self._tasks)}건 취소")
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, evaluation_id: int, submission_id: int, problem_id: int) -> None:
        logger.info(f"채점 시작: evaluation_id={evaluation_id} (submission={submission_id})")
        event_count = 0

        async with self.session_factory() as db:
            try:
                with tempfile.TemporaryDirectory(prefix="turingarena-") as tmp:
                    problem_dir = Path(tmp) / "problem"
                    submission_dir = Path(tmp) / "submission"
                    problem_dir.mkdir()
                    submission_dir.mkdir()

                    for problem_file, content in await self.problem_repo.list_files(db, problem_id):
                        content.extract(problem_dir / problem_file.path)
                    await self.submission_repo.extract(db, submission_id, submission_dir)

                    async with aclosing(self.backend.evaluate(problem_dir, submission_dir)) as events:
                        async for data in events:
                            try:
                                parse_event(data)
                            except InvalidEventError as e:
                                logger.warning(f"잘못된 채점 이벤트 무시 (evaluation={evaluation_id}): {e.message}")
                                continue
                            # 외부에서 채점이 끝났으면 EvaluationClosedError
                            await self.evaluation_repo.append_events(db, evaluation_id, [data])
                            event_count += 1

                await self.evaluation_repo.mark_finished(db, evaluation_id, EvaluationStatus.SUCCESS)
                logger.info(f"채점 완료: evaluation_id={evaluation_id} (이벤트 {event_count}건)")

            except EvaluationClosedError as e:
                logger.warning(f"채점 중단 (외부에서 종료됨): evaluation_id={evaluation_id}: {e.message}")
            except asyncio.CancelledError:
                logger.warning(f"채점 취소됨: evaluation_id={evaluation_id}")
                raise
            except Exception as e:
                await db.rollback()
                logger.error(f"채점 실패: evaluation_id={evaluation_id}: {e}", exc_info=True)
                try:
                    await self.evaluation_repo.mark_finished(
                        db, evaluation_id, EvaluationStatus.ERROR, error=str(e)
                    )
                except EvaluationClosedError as closed:
                    logger.warning(f"실패 기록 생략 (외부에서 종료됨): evaluation_id={evaluation_id}: {closed.message}")


# 싱글톤 인스턴스
_dispatcher: Optional[EvaluationDispatcher] = None


def get_evaluation_dispatcher() -> EvaluationDispatcher:
    """Evaluation Dispatcher 싱글톤 반환"""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = EvaluationDispatcher()
    return _dispatcher
