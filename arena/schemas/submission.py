from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from arena.grading.feedback import FeedbackTable, SummaryRow, TitledColumn
from arena.models.evaluation import EvaluationStatus
from arena.schemas.types import UtcDatetime


class SubmissionFileInput(BaseModel):
    field_id: str = Field(..., min_length=1, max_length=100, description="문제의 제출 필드 ID")
    file_name: str = Field(..., min_length=1, max_length=255, description="원본 파일명")
    content_base64: str = Field(..., description="파일 내용 (base64)")


class SubmissionCreateRequest(BaseModel):
    """
    제출 생성 요청 스키마
    """
    username: str = Field(..., min_length=1, description="제출하는 사용자")
    files: List[SubmissionFileInput] = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "files": [
                    {"field_id": "solution", "file_name": "solution.cpp", "content_base64": "aW50IG1haW4oKXt9"}
                ],
            }
        }
    )


class SubmissionFileResponse(BaseModel):
    field_id: str
    file_name: str
    hash: str
    media_type: str


class EvaluationResponse(BaseModel):
    evaluation_id: int
    submission_id: int
    status: EvaluationStatus
    error: Optional[str] = None
    created_at: Optional[UtcDatetime] = None
    completed_at: Optional[UtcDatetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubmissionResponse(BaseModel):
    """
    제출 상세 응답 스키마
    - official_evaluation: 가장 최근 채점
    - summary / feedback: 공식 채점 이벤트를 집계한 결과
    """
    submission_id: int
    contest: str
    problem: str
    username: str
    created_at: Optional[UtcDatetime] = None
    files: List[SubmissionFileResponse]
    official_evaluation: Optional[EvaluationResponse] = None
    pending: bool
    columns: List[TitledColumn]
    summary: SummaryRow
    feedback: FeedbackTable


class EvaluationEventResponse(BaseModel):
    event_id: int
    evaluation_id: int
    data: dict
    created_at: Optional[UtcDatetime] = None

    model_config = ConfigDict(from_attributes=True)


class EventPushRequest(BaseModel):
    """외부 채점기가 이벤트를 직접 보낼 때 사용 (도착 순서대로 저장)"""
    events: List[dict] = Field(..., min_length=1)


class EvaluationFailRequest(BaseModel):
    error: str = Field(..., min_length=1, description="채점 실패 사유")
