# routers/file.py
from typing import Annotated

from fastapi import Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database import get_session
from arena.services import ContestService
from arena.utils.dependencies import get_contest_service
from arena.utils.router_utils import get_router

router = get_router("files")


@router.get("/{file_hash}", summary="파일 내용", response_class=Response)
async def get_file(
    file_hash: str,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[ContestService, Depends(get_contest_service)],
):
    content = await service.get_file_content(db, file_hash)
    media_type = content.media_type if content.media_type != "unknown" else "application/octet-stream"
    return Response(content=content.content, media_type=media_type)
