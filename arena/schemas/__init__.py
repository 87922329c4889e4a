"""
API 스키마 모듈

Request/Response 스키마들을 정의합니다.
API 데이터 형식을 정의합니다.
"""

from .contest import ContestListResponse, ContestResponse, ContestStatus, FileResponse
from .submission import (EvaluationEventResponse, EvaluationFailRequest,
                         EvaluationResponse, EventPushRequest,
                         SubmissionCreateRequest, SubmissionFileInput,
                         SubmissionFileResponse, SubmissionResponse)
from .user import (ErrorResponse, UserCreateRequest, UserListResponse,
                   UserResponse)
from .view import (AwardView, ContestView, MainView, PendingSubmission,
                   ProblemSetView, ProblemTacklingView, ProblemView,
                   ServerTimeResponse, SubmissionSummary)

__all__ = [
    "UserCreateRequest",
    "UserResponse",
    "UserListResponse",
    "ErrorResponse",
    "ContestStatus",
    "ContestResponse",
    "ContestListResponse",
    "FileResponse",
    "SubmissionFileInput",
    "SubmissionCreateRequest",
    "SubmissionFileResponse",
    "SubmissionResponse",
    "EvaluationResponse",
    "EvaluationEventResponse",
    "EventPushRequest",
    "EvaluationFailRequest",
    "SubmissionSummary",
    "PendingSubmission",
    "ProblemTacklingView",
    "AwardView",
    "ProblemView",
    "ProblemSetView",
    "ContestView",
    "MainView",
    "ServerTimeResponse",
]
