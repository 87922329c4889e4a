import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.exceptions import ConflictError, NotFoundError
from arena.models.contest import Contest
from arena.models.file import FileContent
from arena.models.problem import Problem
from arena.repositories.contest import ContestRepository
from arena.repositories.file import FileRepository
from arena.repositories.problem import ProblemRepository
from arena.repositories.submission import SubmissionRepository
from arena.schemas import ContestListResponse, ContestResponse, ContestStatus, FileResponse
from arena.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def contest_status(contest: Contest, now: Optional[datetime] = None) -> ContestStatus:
    """
    현재 시각 기준 대회 상태
    - 시작 시각 전: NOT_STARTED
    - 종료 시각 이후: ENDED
    - 시작/종료 시각이 없으면 해당 경계는 열려 있는 것으로 취급
    """
    now = ensure_utc(now or utc_now())
    if contest.start_time is not None and now < ensure_utc(contest.start_time):
        return ContestStatus.NOT_STARTED
    if contest.end_time is not None and now >= ensure_utc(contest.end_time):
        return ContestStatus.ENDED
    return ContestStatus.RUNNING


def to_contest_response(contest: Contest, now: Optional[datetime] = None) -> ContestResponse:
    return ContestResponse(
        contest_id=contest.contest_id,
        name=contest.name,
        title=contest.title,
        description=contest.description,
        start_time=ensure_utc(contest.start_time) if contest.start_time else None,
        end_time=ensure_utc(contest.end_time) if contest.end_time else None,
        status=contest_status(contest, now),
    )


class ContestService:
    """
    대회 조회 관련 비즈니스 로직
    """

    def __init__(
        self,
        contest_repository: Optional[ContestRepository] = None,
        file_repository: Optional[FileRepository] = None,
    ):
        self.contest_repository = contest_repository or ContestRepository()
        self.file_repository = file_repository or FileRepository()
        self.problem_repository = ProblemRepository()
        self.submission_repository = SubmissionRepository()

    async def list_contests(self, db: AsyncSession) -> ContestListResponse:
        contests = await self.contest_repository.get_all(db)
        now = utc_now()
        return ContestListResponse(
            contests=[to_contest_response(c, now) for c in contests],
            total=len(contests),
        )

    async def get_contest(self, db: AsyncSession, name: str) -> Contest:
        contest = await self.contest_repository.get_by_name(db, name)
        if not contest:
            raise NotFoundError(f"대회를 찾을 수 없습니다: {name}")
        return contest

    async def get_contest_or_default(self, db: AsyncSession, name: Optional[str]) -> Optional[Contest]:
        """이름이 없으면 기본 대회 (없으면 None)"""
        if name:
            return await self.get_contest(db, name)
        return await self.contest_repository.get_default(db)

    async def get_problem(self, db: AsyncSession, contest: Contest, problem_name: str) -> Problem:
        problem = await self.contest_repository.get_problem(db, contest.contest_id, problem_name)
        if not problem:
            raise NotFoundError(f"대회 {contest.name} 에 문제 {problem_name} 이(가) 없습니다")
        return problem

    async def list_files(self, db: AsyncSession, contest: Contest) -> List[FileResponse]:
        return [
            FileResponse(path=f.path, hash=content.hash, media_type=content.media_type)
            for f, content in await self.contest_repository.list_files(db, contest.contest_id)
        ]

    async def get_file_content(self, db: AsyncSession, file_hash: str) -> FileContent:
        content = await self.file_repository.get_by_hash(db, file_hash)
        if not content:
            raise NotFoundError(f"파일을 찾을 수 없습니다: {file_hash}")
        return content

    async def delete_problem(self, db: AsyncSession, name: str) -> None:
        """
        문제를 삭제합니다. (제출 기록이 있으면 ConflictError)
        """
        problem = await self.problem_repository.get_by_name(db, name)
        if not problem:
            raise NotFoundError(f"문제를 찾을 수 없습니다: {name}")
        if await self.submission_repository.exists_by_problem(db, problem.problem_id):
            raise ConflictError(f"제출 기록이 있는 문제는 삭제할 수 없습니다: {name}")

        try:
            await self.problem_repository.delete(db, name)
        except IntegrityError as e:
            raise ConflictError(f"제출 기록이 있는 문제는 삭제할 수 없습니다: {name}") from e
