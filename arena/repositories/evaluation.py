import logging
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arena.core.exceptions import EvaluationClosedError, NotFoundError
from arena.models.evaluation import Evaluation, EvaluationEvent, EvaluationStatus
from arena.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EvaluationRepository:
    """채점 / 채점 이벤트 관리 Repository"""

    async def create(self, db: AsyncSession, submission_id: int) -> Evaluation:
        """
        PENDING 상태의 새 채점을 생성합니다. (이 채점이 공식 채점이 됨)
        """
        try:
            evaluation = Evaluation(submission_id=submission_id, status=EvaluationStatus.PENDING)
            db.add(evaluation)
            await db.commit()
            await db.refresh(evaluation)
            logger.info(f"채점 생성: evaluation_id={evaluation.evaluation_id} (submission={submission_id})")
            return evaluation
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"채점 생성 오류 (submission={submission_id}): {e}")
            raise

    async def get_by_id(self, db: AsyncSession, evaluation_id: int) -> Optional[Evaluation]:
        return await db.get(Evaluation, evaluation_id)

    async def list_by_submission(self, db: AsyncSession, submission_id: int) -> List[Evaluation]:
        result = await db.execute(
            select(Evaluation)
            .where(Evaluation.submission_id == submission_id)
            .order_by(Evaluation.evaluation_id)
        )
        return list(result.scalars().all())

    async def get_official(self, db: AsyncSession, submission_id: int) -> Optional[Evaluation]:
        """공식 채점 = 가장 최근 채점"""
        result = await db.execute(
            select(Evaluation)
            .where(Evaluation.submission_id == submission_id)
            .order_by(Evaluation.evaluation_id.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def get_official_map(self, db: AsyncSession, submission_ids: Iterable[int]) -> Dict[int, Evaluation]:
        """여러 제출의 공식 채점을 한 번에 조회 (submission_id → Evaluation)"""
        submission_ids = list(submission_ids)
        if not submission_ids:
            return {}

        latest = (
            select(func.max(Evaluation.evaluation_id))
            .where(Evaluation.submission_id.in_(submission_ids))
            .group_by(Evaluation.submission_id)
        )
        result = await db.execute(select(Evaluation).where(Evaluation.evaluation_id.in_(latest)))
        return {e.submission_id: e for e in result.scalars().all()}

    # -------------------- #
    # 이벤트
    # -------------------- #

    async def _lock_pending(self, db: AsyncSession, evaluation_id: int) -> None:
        """채점 행을 잠그고 PENDING 인지 확인 (아니면 트랜잭션을 되돌리고 예외)"""
        result = await db.execute(
            select(Evaluation.status)
            .where(Evaluation.evaluation_id == evaluation_id)
            .with_for_update()
        )
        status = result.scalar_one_or_none()
        if status is None:
            await db.rollback()
            raise NotFoundError(f"채점을 찾을 수 없습니다: {evaluation_id}")
        if status != EvaluationStatus.PENDING:
            await db.rollback()
            raise EvaluationClosedError(f"이미 끝난 채점입니다: evaluation_id={evaluation_id} ({status.value})")

    async def append_events(
        self, db: AsyncSession, evaluation_id: int, events: Sequence[dict]
    ) -> List[EvaluationEvent]:
        """
        PENDING 채점에 이벤트를 순서대로 추가합니다. (전부 저장되거나 하나도 저장되지 않음)

        Raises:
            NotFoundError: 채점이 없는 경우
            EvaluationClosedError: 이미 끝난 채점인 경우
        """
        try:
            await self._lock_pending(db, evaluation_id)
            stored = [EvaluationEvent(evaluation_id=evaluation_id, data=data) for data in events]
            db.add_all(stored)
            await db.commit()
            return stored
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"채점 이벤트 저장 오류 (evaluation={evaluation_id}): {e}")
            raise

    async def append_event(self, db: AsyncSession, evaluation_id: int, data: dict) -> EvaluationEvent:
        stored = await self.append_events(db, evaluation_id, [data])
        return stored[0]

    async def list_events(self, db: AsyncSession, evaluation_id: int) -> List[EvaluationEvent]:
        """이벤트를 도착 순서대로 조회"""
        result = await db.execute(
            select(EvaluationEvent)
            .where(EvaluationEvent.evaluation_id == evaluation_id)
            .order_by(EvaluationEvent.event_id)
        )
        return list(result.scalars().all())

    async def list_event_data_map(self, db: AsyncSession, evaluation_ids: Iterable[int]) -> Dict[int, List[dict]]:
        """여러 채점의 이벤트 데이터를 한 번에 조회 (evaluation_id → [data, ...])"""
        evaluation_ids = list(evaluation_ids)
        events: Dict[int, List[dict]] = {evaluation_id: [] for evaluation_id in evaluation_ids}
        if not evaluation_ids:
            return events

        result = await db.execute(
            select(EvaluationEvent)
            .where(EvaluationEvent.evaluation_id.in_(evaluation_ids))
            .order_by(EvaluationEvent.event_id)
        )
        for event in result.scalars().all():
            events[event.evaluation_id].append(event.data)
        return events

    async def mark_finished(
        self,
        db: AsyncSession,
        evaluation_id: int,
        status: EvaluationStatus,
        error: Optional[str] = None,
    ) -> Evaluation:
        """
        PENDING 채점의 상태를 SUCCESS / ERROR 로 변경합니다.
        이미 끝난 채점의 상태는 바꾸지 않습니다. (EvaluationClosedError)
        """
        result = await db.execute(
            update(Evaluation)
            .where(
                Evaluation.evaluation_id == evaluation_id,
                Evaluation.status == EvaluationStatus.PENDING,
            )
            .values(status=status, error=error, completed_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            current = await db.get(Evaluation, evaluation_id, populate_existing=True)
            if not current:
                raise ValueError(f"Evaluation with id {evaluation_id} not found")
            raise EvaluationClosedError(
                f"이미 끝난 채점입니다: evaluation_id={evaluation_id} ({current.status.value})"
            )

        await db.commit()
        evaluation = await db.get(Evaluation, evaluation_id, populate_existing=True)
        logger.info(f"채점 종료: evaluation_id={evaluation_id} status={status.value}")
        return evaluation
