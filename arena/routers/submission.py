# routers/submission.py
from typing import Annotated, List, Optional

from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database import get_session
from arena.grading.dispatcher import EvaluationDispatcher
from arena.schemas import EvaluationEventResponse, EvaluationResponse, SubmissionResponse
from arena.services import SubmissionService, UserService
from arena.utils.dependencies import get_dispatcher, get_submission_service, get_user_service
from arena.utils.router_utils import get_router

router = get_router("submissions")


@router.get("/{submission_id}", response_model=SubmissionResponse, summary="제출 상세")
async def get_submission(
    submission_id: int,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    username: Optional[str] = Query(None, description="조회하는 사용자 (본인 또는 관리자만 조회 가능)"),
):
    viewer = await user_service.resolve_user(db, username)
    return await service.get_submission(db, submission_id, viewer)


@router.get(
    "/{submission_id}/events",
    response_model=List[EvaluationEventResponse],
    summary="공식 채점 이벤트 목록",
)
async def list_submission_events(
    submission_id: int,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
):
    return await service.list_official_events(db, submission_id)


@router.post(
    "/{submission_id}/evaluations",
    response_model=EvaluationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="재채점",
)
async def reevaluate_submission(
    submission_id: int,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
    dispatcher: Annotated[EvaluationDispatcher, Depends(get_dispatcher)],
):
    return await service.reevaluate(db, dispatcher, submission_id)
