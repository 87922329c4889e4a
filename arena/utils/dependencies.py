# utils/dependencies.py
from arena.grading.dispatcher import EvaluationDispatcher, get_evaluation_dispatcher
from arena.services import ContestService, SubmissionService, UserService, ViewService


def get_user_service() -> UserService:
    """
    사용자 서비스 의존성 주입 (FastAPI Depends용)
    """
    return UserService()


def get_contest_service() -> ContestService:
    return ContestService()


def get_submission_service() -> SubmissionService:
    return SubmissionService()


def get_view_service() -> ViewService:
    return ViewService()


def get_dispatcher() -> EvaluationDispatcher:
    """
    채점 디스패처 의존성 (테스트에서는 dependency_overrides 로 교체)
    """
    return get_evaluation_dispatcher()
