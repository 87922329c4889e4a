import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arena.models.file import FileContent
from arena.models.submission import Submission, SubmissionFile

logger = logging.getLogger(__name__)


class SubmissionRepository:
    """제출 / 제출 파일 관리 Repository"""

    async def create(
        self,
        db: AsyncSession,
        *,
        contest_id: int,
        problem_id: int,
        user_id: int,
        files: Sequence[Tuple[str, str, int]],
    ) -> Submission:
        """
        제출을 생성합니다.

        Args:
            files: (field_id, file_name, content_id) 목록
        """
        try:
            submission = Submission(contest_id=contest_id, problem_id=problem_id, user_id=user_id)
            db.add(submission)
            await db.flush()

            for field_id, file_name, content_id in files:
                db.add(SubmissionFile(
                    submission_id=submission.submission_id,
                    field_id=field_id,
                    file_name=file_name,
                    content_id=content_id,
                ))

            await db.commit()
            await db.refresh(submission)
            logger.info(
                f"제출 생성: submission_id={submission.submission_id} "
                f"(contest={contest_id}, problem={problem_id}, user={user_id})"
            )
            return submission

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"제출 생성 오류: {e}")
            raise

    async def get_by_id(self, db: AsyncSession, submission_id: int) -> Optional[Submission]:
        return await db.get(Submission, submission_id)

    async def list_by_user_and_problem(
        self, db: AsyncSession, *, contest_id: int, user_id: int, problem_id: int
    ) -> List[Submission]:
        """사용자의 특정 문제 제출 목록 (최신순)"""
        result = await db.execute(
            select(Submission)
            .where(
                Submission.contest_id == contest_id,
                Submission.user_id == user_id,
                Submission.problem_id == problem_id,
            )
            .order_by(Submission.submission_id.desc())
        )
        return list(result.scalars().all())

    async def list_by_contest_and_user(self, db: AsyncSession, *, contest_id: int, user_id: int) -> List[Submission]:
        result = await db.execute(
            select(Submission)
            .where(Submission.contest_id == contest_id, Submission.user_id == user_id)
            .order_by(Submission.submission_id.desc())
        )
        return list(result.scalars().all())

    async def exists_by_user(self, db: AsyncSession, user_id: int) -> bool:
        result = await db.execute(select(Submission.submission_id).where(Submission.user_id == user_id).limit(1))
        return result.first() is not None

    async def exists_by_problem(self, db: AsyncSession, problem_id: int) -> bool:
        result = await db.execute(select(Submission.submission_id).where(Submission.problem_id == problem_id).limit(1))
        return result.first() is not None

    async def list_files(self, db: AsyncSession, submission_id: int) -> List[Tuple[SubmissionFile, FileContent]]:
        result = await db.execute(
            select(SubmissionFile, FileContent)
            .join(FileContent, FileContent.content_id == SubmissionFile.content_id)
            .where(SubmissionFile.submission_id == submission_id)
            .order_by(SubmissionFile.submission_file_id)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def extract(self, db: AsyncSession, submission_id: int, base: Path) -> List[Path]:
        """
        제출 파일을 base 디렉토리에 풀어 놓습니다.
        경로: {base}/{field_id}/{file_name}
        """
        paths = []
        for submission_file, content in await self.list_files(db, submission_id):
            path = base / submission_file.field_id / submission_file.file_name
            content.extract(path)
            paths.append(path)
        return paths
