import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arena.models.file import FileContent

logger = logging.getLogger(__name__)


class FileRepository:
    """파일 내용 저장소 (sha256 해시로 중복 제거)"""

    async def get_or_create(self, db: AsyncSession, content: bytes, media_type: str = "unknown") -> FileContent:
        """
        같은 내용이 이미 있으면 재사용하고, 없으면 새로 저장합니다.
        commit 은 호출하는 쪽에서 처리합니다. (flush 만 수행)
        """
        file_hash = FileContent.compute_hash(content)
        existing = await self.get_by_hash(db, file_hash)
        if existing:
            return existing

        file_content = FileContent(hash=file_hash, media_type=media_type, content=content)
        db.add(file_content)
        await db.flush()
        logger.debug(f"파일 내용 저장: {file_hash[:12]} ({len(content)} bytes)")
        return file_content

    async def get_by_hash(self, db: AsyncSession, file_hash: str) -> Optional[FileContent]:
        result = await db.execute(select(FileContent).where(FileContent.hash == file_hash))
        return result.scalars().first()

    async def get_by_id(self, db: AsyncSession, content_id: int) -> Optional[FileContent]:
        return await db.get(FileContent, content_id)
