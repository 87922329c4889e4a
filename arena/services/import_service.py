"""
대회 가져오기

대회 디렉토리 구조:
    turingarena.yaml        대회 정보, 사용자, 문제 목록
    files/                  대회 첨부 파일 (선택)
    <problem>/              문제 패키지 (problem.yaml 이 있으면 제목 / 채점 항목 / 제출 필드를 읽음)

turingarena.yaml 예:
    name: demo
    title: Demo contest
    start: 2020-01-01T00:00:00Z
    end: 2030-01-01T00:00:00Z
    users:
      - {username: alice, name: Alice, token: alice-token}
      - {username: admin, name: Admin, token: admin-token, role: admin}
    problems:
      - sum
      - {name: graph, title: Graph}
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import yaml
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.exceptions import ConflictError, InvalidContestError, NotFoundError
from arena.grading.awards import parse_awards
from arena.models.contest import Contest
from arena.models.problem import Problem
from arena.models.user import UserPrivilege
from arena.repositories.contest import ContestRepository
from arena.repositories.file import FileRepository
from arena.repositories.problem import ProblemRepository
from arena.repositories.user import UserRepository
from arena.utils.datetime import parse_datetime
from arena.utils.media import guess_media_type

logger = logging.getLogger(__name__)

CONTEST_FILE_NAME = "turingarena.yaml"
PROBLEM_FILE_NAME = "problem.yaml"
CONTEST_FILES_DIR = "files"


@dataclass
class ImportReport:
    contest: str
    users: List[str] = field(default_factory=list)
    problems: List[str] = field(default_factory=list)
    files: int = 0


def walk_files(base: Path) -> Iterator[Tuple[str, Path]]:
    """base 아래 모든 파일을 (상대 경로, 실제 경로) 로 순회 (경로 순)"""
    if not base.is_dir():
        return
    for path in sorted(base.rglob("*")):
        if path.is_file():
            yield path.relative_to(base).as_posix(), path


def load_yaml(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise InvalidContestError(f"{path} 을(를) 읽을 수 없습니다: {e}") from e
    if not isinstance(data, dict):
        raise InvalidContestError(f"{path} 의 최상위는 매핑이어야 합니다")
    return data


class ContestImporter:
    """
    대회 디렉토리를 DB 로 가져옵니다. (하나의 트랜잭션)
    """

    def __init__(self):
        self.contest_repo = ContestRepository()
        self.problem_repo = ProblemRepository()
        self.user_repo = UserRepository()
        self.file_repo = FileRepository()

    async def import_contest(self, db: AsyncSession, directory: Union[str, Path]) -> ImportReport:
        directory = Path(directory)
        contest_yaml = directory / CONTEST_FILE_NAME
        if not contest_yaml.is_file():
            raise InvalidContestError(f"대회 디렉토리가 아닙니다 ({CONTEST_FILE_NAME} 없음): {directory}")

        data = load_yaml(contest_yaml)
        try:
            report = await self._import(db, directory, data)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictError(f"이미 존재하는 대회 / 문제 / 사용자와 충돌합니다: {e.orig}") from e
        except Exception:
            await db.rollback()
            raise

        logger.info(
            f"대회 가져오기 완료: {report.contest} "
            f"(사용자 {len(report.users)}명, 문제 {len(report.problems)}개, 파일 {report.files}개)"
        )
        return report

    async def _import(self, db: AsyncSession, directory: Path, data: dict) -> ImportReport:
        name = data.get("name") or directory.resolve().name
        try:
            start_time = parse_datetime(data.get("start"))
            end_time = parse_datetime(data.get("end"))
        except ValueError as e:
            raise InvalidContestError(f"대회 시각 형식 오류: {e}") from e

        contest = await self.contest_repo.create(
            db,
            name=str(name),
            title=data.get("title"),
            description=data.get("description"),
            start_time=start_time,
            end_time=end_time,
        )
        report = ImportReport(contest=contest.name)

        for path, real_path in walk_files(directory / CONTEST_FILES_DIR):
            content = await self.file_repo.get_or_create(db, real_path.read_bytes(), guess_media_type(path))
            await self.contest_repo.add_file(db, contest.contest_id, path, content.content_id)
            report.files += 1

        for user_data in data.get("users") or []:
            await self._import_user(db, contest, user_data)
            report.users.append(user_data["username"])

        for position, problem_data in enumerate(data.get("problems") or []):
            problem_name, files = await self._import_problem_entry(db, contest, directory, problem_data, position)
            report.problems.append(problem_name)
            report.files += files

        return report

    async def _import_user(self, db: AsyncSession, contest: Contest, user_data: dict) -> None:
        if not isinstance(user_data, dict) or "username" not in user_data:
            raise InvalidContestError(f"사용자 항목에는 username 이 필요합니다: {user_data!r}")

        username = str(user_data["username"])
        privilege = UserPrivilege.ADMIN if user_data.get("role") == "admin" else UserPrivilege.USER
        user = await self.user_repo.add(
            db,
            username=username,
            name=str(user_data.get("name") or username),
            token=str(user_data.get("token") or username),
            privilege=privilege,
        )
        await self.contest_repo.add_participant(db, contest.contest_id, user.user_id)

    async def _import_problem_entry(
        self, db: AsyncSession, contest: Contest, directory: Path, problem_data, position: int
    ) -> Tuple[str, int]:
        if isinstance(problem_data, dict):
            name = problem_data.get("name")
            overrides = {k: v for k, v in problem_data.items() if k != "name"}
        else:
            name = problem_data
            overrides = {}
        if not name:
            raise InvalidContestError(f"문제 항목에는 이름이 필요합니다: {problem_data!r}")

        problem, files = await self._import_problem(db, str(name), directory / str(name), overrides)
        await self.contest_repo.add_problem(db, contest.contest_id, problem.problem_id, position)
        return problem.name, files

    async def _import_problem(
        self, db: AsyncSession, name: str, problem_dir: Path, overrides: Optional[dict] = None
    ) -> Tuple[Problem, int]:
        """문제 디렉토리 하나를 가져옵니다. (problem.yaml 이 있으면 제목 / 채점 항목 / 제출 필드를 읽음)"""
        if not problem_dir.is_dir():
            raise InvalidContestError(f"문제 디렉토리가 없습니다: {problem_dir}")

        metadata = {}
        if (problem_dir / PROBLEM_FILE_NAME).is_file():
            metadata = load_yaml(problem_dir / PROBLEM_FILE_NAME)
        metadata.update(overrides or {})

        awards = metadata.get("awards") or []
        try:
            parse_awards(awards)
        except ValidationError as e:
            raise InvalidContestError(f"문제 {name} 의 채점 항목 형식 오류: {e}") from e

        problem = await self.problem_repo.create(
            db,
            name=name,
            title=metadata.get("title"),
            awards=awards,
            submission_fields=metadata.get("submission_fields"),
        )

        files = 0
        for path, real_path in walk_files(problem_dir):
            content = await self.file_repo.get_or_create(db, real_path.read_bytes(), guess_media_type(path))
            await self.problem_repo.add_file(db, problem.problem_id, path, content.content_id)
            files += 1
        return problem, files

    async def add_problem(
        self, db: AsyncSession, name: str, problem_dir: Union[str, Path], contest_name: Optional[str] = None
    ) -> Problem:
        """
        문제 하나를 추가합니다.
        contest_name 이 주어지면 해당 대회의 마지막 문제로 배정합니다.
        """
        try:
            problem, files = await self._import_problem(db, name, Path(problem_dir))
            if contest_name:
                contest = await self.contest_repo.get_by_name(db, contest_name)
                if not contest:
                    raise NotFoundError(f"대회를 찾을 수 없습니다: {contest_name}")
                position = len(await self.contest_repo.list_problems(db, contest.contest_id))
                await self.contest_repo.add_problem(db, contest.contest_id, problem.problem_id, position)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictError(f"이미 존재하는 문제입니다: {name}") from e
        except Exception:
            await db.rollback()
            raise

        logger.info(f"문제 추가 완료: {name} (파일 {files}개)")
        return problem
