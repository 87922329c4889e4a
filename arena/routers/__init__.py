"""
컨트롤러 모듈

API 엔드포인트들을 정의합니다.
외부 HTTP 요청을 직접 받는 엔드포인트입니다.
요청을 받아 적절한 서비스로 라우팅합니다.
"""

from .contest import router as contest_router
from .evaluation import router as evaluation_router
from .file import router as file_router
from .main_view import router as main_view_router
from .submission import router as submission_router
from .user import router as user_router

__all__ = [
    "main_view_router",
    "contest_router",
    "submission_router",
    "evaluation_router",
    "user_router",
    "file_router",
]
