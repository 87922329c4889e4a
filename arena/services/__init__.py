"""
서비스 계층 모듈

비즈니스 로직을 담당합니다.
Repository와 Controller 사이의 중간 계층입니다.
"""

from .contest_service import ContestService
from .submission_service import SubmissionService
from .user_service import UserService
from .view_service import ViewService

__all__ = [
    "ContestService",
    "SubmissionService",
    "UserService",
    "ViewService",
]
