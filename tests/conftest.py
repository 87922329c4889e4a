from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from arena.database import get_session, init_db
from arena.grading.dispatcher import EvaluationDispatcher
from arena.models.user import UserPrivilege
from arena.repositories.contest import ContestRepository
from arena.repositories.file import FileRepository
from arena.repositories.problem import ProblemRepository
from arena.repositories.user import UserRepository
from arena.utils.datetime import utc_now
from arena.utils.dependencies import get_dispatcher
from factories import AWARDS


class FakeBackend:
    """정해진 이벤트를 순서대로 내보내는 채점기 (error 가 있으면 마지막에 발생)"""

    def __init__(self, events=None, error=None):
        self.events = list(events or [])
        self.error = error
        self.calls = []

    async def evaluate(self, problem_dir, submission_dir):
        self.calls.append({
            "problem": sorted(p.relative_to(problem_dir).as_posix() for p in problem_dir.rglob("*") if p.is_file()),
            "submission": {
                p.relative_to(submission_dir).as_posix(): p.read_bytes()
                for p in submission_dir.rglob("*") if p.is_file()
            },
        })
        for event in self.events:
            yield event
        if self.error is not None:
            raise self.error


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def backend():
    return FakeBackend()


@pytest_asyncio.fixture
async def dispatcher(backend, session_factory):
    dispatcher = EvaluationDispatcher(backend=backend, session_factory=session_factory)
    yield dispatcher
    await dispatcher.shutdown()


@pytest_asyncio.fixture
async def seeded(db):
    """
    진행 중인 대회 demo
    - 문제 sum (채점 항목 3개, 첨부 파일 1개)
    - alice: 참가자, bob: 비참가자, admin: 관리자 (참가자)
    """
    contest_repo = ContestRepository()
    problem_repo = ProblemRepository()
    user_repo = UserRepository()
    file_repo = FileRepository()

    now = utc_now()
    contest = await contest_repo.create(
        db,
        name="demo",
        title="Demo Contest",
        start_time=now - timedelta(hours=1),
        end_time=now + timedelta(hours=1),
    )
    problem = await problem_repo.create(db, name="sum", title="Sum", awards=AWARDS)
    await contest_repo.add_problem(db, contest.contest_id, problem.problem_id, 0)

    statement = await file_repo.get_or_create(db, b"# Sum\n", "text/markdown")
    await problem_repo.add_file(db, problem.problem_id, "statement.md", statement.content_id)
    rules = await file_repo.get_or_create(db, b"be nice", "text/plain")
    await contest_repo.add_file(db, contest.contest_id, "rules.txt", rules.content_id)

    alice = await user_repo.add(db, username="alice", name="Alice", token="alice-token")
    bob = await user_repo.add(db, username="bob", name="Bob", token="bob-token")
    admin = await user_repo.add(
        db, username="admin", name="Admin", token="admin-token", privilege=UserPrivilege.ADMIN
    )
    await contest_repo.add_participant(db, contest.contest_id, alice.user_id)
    await contest_repo.add_participant(db, contest.contest_id, admin.user_id)
    await db.commit()

    return {"contest": contest, "problem": problem, "alice": alice, "bob": bob, "admin": admin}


@pytest_asyncio.fixture
async def client(session_factory, dispatcher):
    from arena.main import app

    async def get_session_override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()
