# routers/main_view.py
from typing import Annotated, Optional

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database import get_session
from arena.schemas import MainView, ServerTimeResponse
from arena.services import ContestService, UserService, ViewService
from arena.utils.datetime import to_utc_string, utc_now
from arena.utils.dependencies import get_contest_service, get_user_service, get_view_service
from arena.utils.router_utils import get_router

router = get_router("")


@router.get(
    "/main",
    response_model=MainView,
    summary="메인 뷰",
    description="대회 첫 화면 데이터 (클라이언트가 주기적으로 폴링)",
)
async def get_main_view(
    db: Annotated[AsyncSession, Depends(get_session)],
    contest_service: Annotated[ContestService, Depends(get_contest_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    view_service: Annotated[ViewService, Depends(get_view_service)],
    contest: Optional[str] = Query(None, description="대회 이름 (없으면 기본 대회)"),
    username: Optional[str] = Query(None, description="사용자 (없으면 익명)"),
):
    """
    - **contest**: 대회 이름 (생략 시 가장 먼저 등록된 대회)
    - **username**: 조회하는 사용자 (생략 시 익명)
    """
    contest_model = await contest_service.get_contest_or_default(db, contest)
    user = await user_service.resolve_user(db, username)
    return await view_service.main_view(db, contest_model, user)


@router.get("/time", response_model=ServerTimeResponse, summary="서버 시각")
async def get_server_time():
    return ServerTimeResponse(now=to_utc_string(utc_now()))
