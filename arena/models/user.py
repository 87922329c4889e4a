from enum import Enum
from typing import Optional

from sqlmodel import Field

from arena.models.base import BaseModel


class UserPrivilege(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(BaseModel, table=True):
    """
    대회 참가자 / 관리자 정보를 저장하는 테이블
    - username 으로 식별 (뷰 요청 시 사용)
    - token 은 대회 파일에서 가져온 값을 그대로 보관만 함
    """

    __tablename__ = "users"  # ✅ SQL 예약어 충돌 방지

    user_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="사용자 고유 ID",
        sa_column_kwargs={"autoincrement": True}
    )

    username: str = Field(
        max_length=100,
        nullable=False,
        description="사용자 식별자 (로그인 아이디)",
        sa_column_kwargs={"unique": True}
    )

    name: str = Field(
        max_length=100,
        nullable=False,
        description="표시용 이름"
    )

    token: str = Field(
        max_length=255,
        nullable=False,
        description="대회 파일에서 가져온 사용자 토큰",
        sa_column_kwargs={"unique": True}
    )

    privilege: UserPrivilege = Field(
        default=UserPrivilege.USER,
        description="권한 (USER, ADMIN)"
    )

    @property
    def is_admin(self) -> bool:
        return self.privilege == UserPrivilege.ADMIN

    def to_dict(self) -> dict:
        """
        토큰을 제외한 사용자 정보를 딕셔너리 형태로 반환합니다.
        """
        return {
            "user_id": self.user_id,
            "username": self.username,
            "name": self.name,
            "privilege": self.privilege,
            "created_at": self.created_at,
        }

    def __repr__(self) -> str:
        return f"<User(id={self.user_id}, username='{self.username}', name='{self.name}')>"
