from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from arena.schemas.types import UtcDatetime


class ContestStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    RUNNING = "RUNNING"
    ENDED = "ENDED"


class ContestResponse(BaseModel):
    """
    대회 정보 응답 스키마
    """
    contest_id: int
    name: str
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[UtcDatetime] = None
    end_time: Optional[UtcDatetime] = None
    status: ContestStatus = Field(..., description="현재 시각 기준 대회 진행 상태")

    model_config = ConfigDict(from_attributes=True)


class ContestListResponse(BaseModel):
    contests: List[ContestResponse]
    total: int


class FileResponse(BaseModel):
    """첨부 파일 정보 (내용은 /files/{hash} 로 조회)"""
    path: str
    hash: str
    media_type: str
