import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arena.models.contest import Contest, ContestFile, ContestProblem, Participation
from arena.models.file import FileContent
from arena.models.problem import Problem
from arena.models.user import User

logger = logging.getLogger(__name__)


class ContestRepository:
    """대회 / 문제 배정 / 참가자 관리 Repository"""

    async def create(
        self,
        db: AsyncSession,
        *,
        name: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> Contest:
        """
        새로운 대회를 생성합니다. (commit 은 호출하는 쪽에서)
        """
        contest = Contest(
            name=name,
            title=title,
            description=description,
            start_time=start_time,
            end_time=end_time,
        )
        db.add(contest)
        await db.flush()
        logger.info(f"대회 생성: {name}")
        return contest

    async def get_by_id(self, db: AsyncSession, contest_id: int) -> Optional[Contest]:
        return await db.get(Contest, contest_id)

    async def get_by_name(self, db: AsyncSession, name: str) -> Optional[Contest]:
        result = await db.execute(select(Contest).where(Contest.name == name))
        return result.scalars().first()

    async def get_default(self, db: AsyncSession) -> Optional[Contest]:
        """기본 대회 (가장 먼저 등록된 대회)"""
        result = await db.execute(select(Contest).order_by(Contest.contest_id).limit(1))
        return result.scalars().first()

    async def get_all(self, db: AsyncSession) -> List[Contest]:
        result = await db.execute(select(Contest).order_by(Contest.contest_id))
        return list(result.scalars().all())

    # -------------------- #
    # 문제 배정
    # -------------------- #

    async def add_problem(self, db: AsyncSession, contest_id: int, problem_id: int, position: int) -> ContestProblem:
        assignment = ContestProblem(contest_id=contest_id, problem_id=problem_id, position=position)
        db.add(assignment)
        await db.flush()
        return assignment

    async def list_problems(self, db: AsyncSession, contest_id: int) -> List[Problem]:
        """대회에 배정된 문제를 출제 순서대로 조회"""
        result = await db.execute(
            select(Problem)
            .join(ContestProblem, ContestProblem.problem_id == Problem.problem_id)
            .where(ContestProblem.contest_id == contest_id)
            .order_by(ContestProblem.position, Problem.problem_id)
        )
        return list(result.scalars().all())

    async def get_problem(self, db: AsyncSession, contest_id: int, problem_name: str) -> Optional[Problem]:
        result = await db.execute(
            select(Problem)
            .join(ContestProblem, ContestProblem.problem_id == Problem.problem_id)
            .where(ContestProblem.contest_id == contest_id, Problem.name == problem_name)
        )
        return result.scalars().first()

    # -------------------- #
    # 참가자
    # -------------------- #

    async def add_participant(self, db: AsyncSession, contest_id: int, user_id: int) -> Participation:
        participation = Participation(contest_id=contest_id, user_id=user_id)
        db.add(participation)
        await db.flush()
        return participation

    async def is_participant(self, db: AsyncSession, contest_id: int, user_id: int) -> bool:
        result = await db.execute(
            select(Participation.participation_id).where(
                Participation.contest_id == contest_id,
                Participation.user_id == user_id,
            )
        )
        return result.first() is not None

    async def list_participants(self, db: AsyncSession, contest_id: int) -> List[User]:
        result = await db.execute(
            select(User)
            .join(Participation, Participation.user_id == User.user_id)
            .where(Participation.contest_id == contest_id)
            .order_by(User.user_id)
        )
        return list(result.scalars().all())

    # -------------------- #
    # 첨부 파일
    # -------------------- #

    async def add_file(self, db: AsyncSession, contest_id: int, path: str, content_id: int) -> ContestFile:
        contest_file = ContestFile(contest_id=contest_id, path=path, content_id=content_id)
        db.add(contest_file)
        await db.flush()
        return contest_file

    async def list_files(self, db: AsyncSession, contest_id: int) -> List[Tuple[ContestFile, FileContent]]:
        result = await db.execute(
            select(ContestFile, FileContent)
            .join(FileContent, FileContent.content_id == ContestFile.content_id)
            .where(ContestFile.contest_id == contest_id)
            .order_by(ContestFile.path)
        )
        return [(row[0], row[1]) for row in result.all()]
