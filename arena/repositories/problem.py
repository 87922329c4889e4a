import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arena.models.contest import ContestProblem
from arena.models.file import FileContent
from arena.models.problem import Problem, ProblemFile

logger = logging.getLogger(__name__)


class ProblemRepository:
    """
    문제 데이터베이스 접근을 담당하는 Repository 클래스
    """

    async def create(
        self,
        db: AsyncSession,
        *,
        name: str,
        title: Optional[str] = None,
        awards: Optional[list] = None,
        submission_fields: Optional[list] = None,
    ) -> Problem:
        """
        새로운 문제를 생성합니다. (commit 은 호출하는 쪽에서)
        """
        problem = Problem(
            name=name,
            title=title,
            awards=awards or [],
            submission_fields=submission_fields or ["solution"],
        )
        db.add(problem)
        await db.flush()
        logger.info(f"문제 생성: {name} (채점 항목 {len(problem.awards)}개)")
        return problem

    async def get_by_id(self, db: AsyncSession, problem_id: int) -> Optional[Problem]:
        return await db.get(Problem, problem_id)

    async def get_by_name(self, db: AsyncSession, name: str) -> Optional[Problem]:
        result = await db.execute(select(Problem).where(Problem.name == name))
        return result.scalars().first()

    async def get_all(self, db: AsyncSession) -> List[Problem]:
        result = await db.execute(select(Problem).order_by(Problem.problem_id))
        return list(result.scalars().all())

    async def add_file(self, db: AsyncSession, problem_id: int, path: str, content_id: int) -> ProblemFile:
        problem_file = ProblemFile(problem_id=problem_id, path=path, content_id=content_id)
        db.add(problem_file)
        await db.flush()
        return problem_file

    async def list_files(self, db: AsyncSession, problem_id: int) -> List[Tuple[ProblemFile, FileContent]]:
        """문제 파일과 내용을 경로 순으로 조회"""
        result = await db.execute(
            select(ProblemFile, FileContent)
            .join(FileContent, FileContent.content_id == ProblemFile.content_id)
            .where(ProblemFile.problem_id == problem_id)
            .order_by(ProblemFile.path)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def delete(self, db: AsyncSession, name: str) -> bool:
        """
        문제와 문제 파일을 삭제합니다.
        """
        try:
            problem = await self.get_by_name(db, name)
            if not problem:
                return False

            for model in (ProblemFile, ContestProblem):
                rows = await db.execute(select(model).where(model.problem_id == problem.problem_id))
                for row in rows.scalars().all():
                    await db.delete(row)

            await db.delete(problem)
            await db.commit()
            logger.info(f"문제 삭제 완료: {name}")
            return True

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"문제 삭제 오류 (name={name}): {e}")
            raise
