from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from arena.models.user import UserPrivilege


class UserCreateRequest(BaseModel):
    """
    사용자 생성 요청 스키마
    """
    username: str = Field(..., min_length=1, max_length=100, description="로그인 이름")
    name: str = Field(..., min_length=1, max_length=100, description="표시 이름")
    token: str = Field(..., min_length=1, max_length=255, description="접속 토큰")
    privilege: UserPrivilege = Field(default=UserPrivilege.USER, description="권한")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "name": "Alice",
                "token": "alice-secret",
                "privilege": "USER",
            }
        }
    )


class UserResponse(BaseModel):
    """
    사용자 정보 응답 스키마 (토큰은 포함하지 않음)
    """
    user_id: int = Field(..., description="사용자 ID")
    username: str
    name: str
    privilege: UserPrivilege

    model_config = ConfigDict(from_attributes=True)


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int


class ErrorResponse(BaseModel):
    """
    에러 응답 스키마
    """
    error: str = Field(..., description="에러 메시지")
    detail: Optional[str] = Field(None, description="상세 에러 정보")
