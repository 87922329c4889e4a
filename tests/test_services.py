import pytest

from arena.core.exceptions import ConflictError, NotFoundError
from arena.repositories.problem import ProblemRepository
from arena.repositories.user import UserRepository
from arena.services import ContestService, UserService
from factories import create_bare_submission


async def test_delete_user_with_submissions_conflicts(db, seeded):
    await create_bare_submission(db, seeded)

    with pytest.raises(ConflictError):
        await UserService().delete_user(db, "alice")

    assert await UserRepository().get_by_username(db, "alice") is not None


async def test_delete_user_without_submissions(db, seeded):
    await UserService().delete_user(db, "bob")

    with pytest.raises(NotFoundError):
        await UserService().delete_user(db, "bob")


async def test_delete_problem_with_submissions_conflicts(db, seeded):
    await create_bare_submission(db, seeded)

    with pytest.raises(ConflictError):
        await ContestService().delete_problem(db, "sum")

    assert await ProblemRepository().get_by_name(db, "sum") is not None


async def test_delete_problem_without_submissions(db, seeded):
    await ContestService().delete_problem(db, "sum")

    assert await ProblemRepository().get_by_name(db, "sum") is None
    with pytest.raises(NotFoundError):
        await ContestService().delete_problem(db, "sum")
