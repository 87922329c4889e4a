# routers/evaluation.py
from typing import Annotated, List

from fastapi import Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database import get_session
from arena.schemas import (
    ErrorResponse,
    EvaluationEventResponse,
    EvaluationFailRequest,
    EvaluationResponse,
    EventPushRequest,
)
from arena.services import SubmissionService
from arena.utils.dependencies import get_submission_service
from arena.utils.router_utils import get_router

# 외부 채점기용 엔드포인트
router = get_router("evaluations")


@router.post(
    "/{evaluation_id}/events",
    response_model=List[EvaluationEventResponse],
    status_code=status.HTTP_201_CREATED,
    summary="채점 이벤트 추가",
    responses={
        400: {"model": ErrorResponse, "description": "이벤트 형식 오류"},
        409: {"model": ErrorResponse, "description": "이미 끝난 채점"},
    },
)
async def push_events(
    evaluation_id: int,
    request: EventPushRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
):
    return await service.push_events(db, evaluation_id, request.events)


@router.post("/{evaluation_id}/complete", response_model=EvaluationResponse, summary="채점 완료")
async def complete_evaluation(
    evaluation_id: int,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
):
    return await service.complete(db, evaluation_id)


@router.post("/{evaluation_id}/fail", response_model=EvaluationResponse, summary="채점 실패 처리")
async def fail_evaluation(
    evaluation_id: int,
    request: EvaluationFailRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    service: Annotated[SubmissionService, Depends(get_submission_service)],
):
    return await service.fail(db, evaluation_id, request.error)
