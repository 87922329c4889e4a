# routers/contest.py
from typing import Annotated, Optional

from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database import get_session
from arena.grading.dispatcher import EvaluationDispatcher
from arena.schemas import (
    ContestListResponse,
    ContestResponse,
    ContestView,
    ErrorResponse,
    ProblemView,
    SubmissionCreateRequest,
    SubmissionResponse,
)
from arena.services import ContestService, SubmissionService, UserService, ViewService
from arena.services.contest_service import to_contest_response
from arena.utils.dependencies import (
    get_contest_service,
    get_dispatcher,
    get_submission_service,
    get_user_service,
    get_view_service,
)
from arena.utils.router_utils import get_router

# 라우터 생성
router = get_router("contests")


@router.get("", response_model=ContestListResponse, summary="대회 목록")
async def list_contests(
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[ContestService, Depends(get_contest_service)],
):
    return await service.list_contests(db)


@router.get(
    "/{name}",
    response_model=ContestResponse,
    summary="대회 조회",
    responses={404: {"model": ErrorResponse, "description": "대회 없음"}},
)
async def get_contest(
    name: str,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[ContestService, Depends(get_contest_service)],
):
    contest = await service.get_contest(db, name)
    return to_contest_response(contest)


@router.get(
    "/{name}/view",
    response_model=ContestView,
    summary="대회 뷰",
    description="대회 정보, 문제 목록(시작 후), 사용자별 점수",
)
async def get_contest_view(
    name: str,
    db: Annotated[AsyncSession, Depends(get_session)],
    contest_service: Annotated[ContestService, Depends(get_contest_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    view_service: Annotated[ViewService, Depends(get_view_service)],
    username: Optional[str] = Query(None, description="사용자 (없으면 익명)"),
):
    contest = await contest_service.get_contest(db, name)
    user = await user_service.resolve_user(db, username)
    return await view_service.contest_view(db, contest, user)


@router.get(
    "/{name}/problems/{problem}/view",
    response_model=ProblemView,
    summary="문제 뷰",
    description="문제 정보, 채점 항목, 사용자의 제출 목록과 최고 점수",
)
async def get_problem_view(
    name: str,
    problem: str,
    db: Annotated[AsyncSession, Depends(get_session)],
    contest_service: Annotated[ContestService, Depends(get_contest_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    view_service: Annotated[ViewService, Depends(get_view_service)],
    username: Optional[str] = Query(None, description="사용자 (없으면 익명)"),
):
    contest = await contest_service.get_contest(db, name)
    problem_model = await contest_service.get_problem(db, contest, problem)
    user = await user_service.resolve_user(db, username)
    return await view_service.problem_view(db, contest, problem_model, user)


@router.post(
    "/{name}/problems/{problem}/submissions",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="제출",
    responses={
        404: {"model": ErrorResponse, "description": "대회 / 문제 / 사용자 없음"},
        422: {"model": ErrorResponse, "description": "제출 조건 불만족"},
    },
)
async def submit(
    name: str,
    problem: str,
    request: SubmissionCreateRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
    dispatcher: Annotated[EvaluationDispatcher, Depends(get_dispatcher)],
):
    """
    파일을 제출하고 채점을 시작합니다.

    - **username**: 제출하는 사용자 (대회 참가자여야 함)
    - **files**: 문제의 제출 필드마다 파일 하나 (field_id, file_name, content_base64)
    """
    return await service.submit(db, dispatcher, name, problem, request)
