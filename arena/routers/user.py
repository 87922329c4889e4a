# routers/user.py
from typing import Annotated

from fastapi import Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database import get_session
from arena.schemas import ErrorResponse, UserCreateRequest, UserListResponse, UserResponse
from arena.services import UserService
from arena.utils.dependencies import get_user_service
from arena.utils.router_utils import get_router

# 라우터 생성
router = get_router("users")


@router.get("", response_model=UserListResponse, summary="사용자 목록")
async def list_users(
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    return await service.list_users(db, skip=skip, limit=limit)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="사용자 생성",
    responses={409: {"model": ErrorResponse, "description": "이미 존재하는 사용자"}},
)
async def create_user(
    user_data: UserCreateRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """
    - **username**: 로그인 이름 (중복 불가)
    - **name**: 표시 이름
    - **token**: 접속 토큰 (중복 불가)
    - **privilege**: USER / ADMIN
    """
    return await service.create_user(db, user_data)


@router.delete(
    "/{username}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="사용자 삭제",
    responses={404: {"model": ErrorResponse, "description": "사용자 없음"}},
)
async def delete_user(
    username: str,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    await service.delete_user(db, username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
