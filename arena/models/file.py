import hashlib
from pathlib import Path
from typing import Optional

from sqlalchemy import Column, LargeBinary
from sqlmodel import Field

from arena.models.base import BaseModel


class FileContent(BaseModel, table=True):
    """
    파일 내용 (해시 기준으로 중복 저장하지 않음)
    - 문제 / 대회 첨부 파일과 제출 파일이 모두 이 테이블을 참조
    """

    __tablename__ = "file_contents"

    content_id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="파일 내용 ID",
        sa_column_kwargs={"autoincrement": True},
    )

    hash: str = Field(
        max_length=64,
        nullable=False,
        index=True,
        description="내용의 sha256 해시 (hex)",
        sa_column_kwargs={"unique": True},
    )

    media_type: str = Field(
        default="unknown",
        max_length=100,
        description="MIME 타입",
    )

    content: bytes = Field(
        sa_column=Column(LargeBinary, nullable=False),
        description="파일 바이트",
    )

    @staticmethod
    def compute_hash(content: bytes) -> str:
        return hashlib.sha256(content).hexdigest()

    def extract(self, path: Path) -> None:
        """지정한 경로에 파일 내용을 기록합니다. (상위 디렉토리 자동 생성)"""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.content)
