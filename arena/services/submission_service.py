import base64
import binascii
import logging
from pathlib import PurePosixPath
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.exceptions import (
    EvaluationClosedError,
    NotFoundError,
    SubmissionRejectedError,
)
from arena.grading.aggregator import summarize
from arena.grading.awards import parse_awards
from arena.grading.dispatcher import EvaluationDispatcher
from arena.grading.events import parse_event
from arena.grading.feedback import feedback_table, submission_list_columns, summary_row
from arena.models.evaluation import Evaluation, EvaluationStatus
from arena.models.submission import Submission
from arena.models.user import User
from arena.repositories.contest import ContestRepository
from arena.repositories.evaluation import EvaluationRepository
from arena.repositories.file import FileRepository
from arena.repositories.problem import ProblemRepository
from arena.repositories.submission import SubmissionRepository
from arena.repositories.user import UserRepository
from arena.schemas import (
    ContestStatus,
    EvaluationEventResponse,
    EvaluationResponse,
    SubmissionCreateRequest,
    SubmissionFileResponse,
    SubmissionResponse,
)
from arena.services.contest_service import ContestService, contest_status
from arena.utils.media import guess_media_type

logger = logging.getLogger(__name__)


class SubmissionService:
    """
    제출 / 채점 관련 비즈니스 로직
    - 제출 접수 (대회 진행 중, 참가자, 제출 필드 검증)
    - 제출 상세 (공식 채점 요약 + 피드백 표)
    - 외부 채점기의 이벤트 추가 / 채점 완료 / 채점 실패
    """

    def __init__(self, contest_service: Optional[ContestService] = None):
        self.contest_service = contest_service or ContestService()
        self.contest_repo = ContestRepository()
        self.problem_repo = ProblemRepository()
        self.submission_repo = SubmissionRepository()
        self.evaluation_repo = EvaluationRepository()
        self.file_repo = FileRepository()
        self.user_repo = UserRepository()

    # -------------------- #
    # 제출
    # -------------------- #

    async def submit(
        self,
        db: AsyncSession,
        dispatcher: EvaluationDispatcher,
        contest_name: str,
        problem_name: str,
        request: SubmissionCreateRequest,
    ) -> SubmissionResponse:
        """
        제출을 접수하고 채점을 시작합니다.

        Raises:
            NotFoundError: 대회 / 문제 / 사용자가 없는 경우
            SubmissionRejectedError: 대회가 진행 중이 아니거나, 참가자가 아니거나,
                제출 필드 구성이 문제와 맞지 않는 경우
        """
        contest = await self.contest_service.get_contest(db, contest_name)
        problem = await self.contest_service.get_problem(db, contest, problem_name)
        user = await self.user_repo.get_by_username(db, request.username)
        if not user:
            raise NotFoundError(f"사용자를 찾을 수 없습니다: {request.username}")

        status = contest_status(contest)
        if status != ContestStatus.RUNNING:
            raise SubmissionRejectedError(f"대회가 진행 중이 아닙니다 ({status.value})")
        if not await self.contest_repo.is_participant(db, contest.contest_id, user.user_id):
            raise SubmissionRejectedError(f"{user.username} 은(는) 대회 {contest.name} 의 참가자가 아닙니다")

        field_ids = [f.field_id for f in request.files]
        if len(set(field_ids)) != len(field_ids):
            raise SubmissionRejectedError("같은 필드에 파일이 여러 개 있습니다")
        if set(field_ids) != set(problem.submission_fields):
            raise SubmissionRejectedError(
                f"제출 필드가 맞지 않습니다: 필요 {sorted(problem.submission_fields)}, 받음 {sorted(field_ids)}"
            )

        files = []
        for file_input in request.files:
            # 파일명은 경로 구분자 없이 이름만 허용
            if PurePosixPath(file_input.file_name).name != file_input.file_name or file_input.file_name in (".", ".."):
                raise SubmissionRejectedError(f"잘못된 파일명입니다: {file_input.file_name}")
            try:
                content = base64.b64decode(file_input.content_base64, validate=True)
            except (binascii.Error, ValueError) as e:
                raise SubmissionRejectedError(f"파일 내용이 올바른 base64 가 아닙니다: {file_input.file_name}") from e

            file_content = await self.file_repo.get_or_create(
                db, content, media_type=guess_media_type(file_input.file_name)
            )
            files.append((file_input.field_id, file_input.file_name, file_content.content_id))

        submission = await self.submission_repo.create(
            db,
            contest_id=contest.contest_id,
            problem_id=problem.problem_id,
            user_id=user.user_id,
            files=files,
        )
        await dispatcher.submit(db, submission.submission_id)
        return await self.get_submission(db, submission.submission_id)

    async def get_submission_model(self, db: AsyncSession, submission_id: int) -> Submission:
        submission = await self.submission_repo.get_by_id(db, submission_id)
        if not submission:
            raise NotFoundError(f"제출을 찾을 수 없습니다: {submission_id}")
        return submission

    async def get_submission(
        self, db: AsyncSession, submission_id: int, viewer: Optional[User] = None
    ) -> SubmissionResponse:
        """
        제출 상세를 조회합니다.
        viewer 가 주어지면 본인 또는 관리자만 볼 수 있습니다. (그 외에는 없는 제출로 취급)
        """
        submission = await self.get_submission_model(db, submission_id)
        if viewer is not None and not viewer.is_admin and viewer.user_id != submission.user_id:
            raise NotFoundError(f"제출을 찾을 수 없습니다: {submission_id}")

        contest = await self.contest_repo.get_by_id(db, submission.contest_id)
        problem = await self.problem_repo.get_by_id(db, submission.problem_id)
        owner = await self.user_repo.get_by_id(db, submission.user_id)
        awards = parse_awards(problem.awards)

        evaluation = await self.evaluation_repo.get_official(db, submission_id)
        summary = None
        if evaluation is not None:
            events = await self.evaluation_repo.list_events(db, evaluation.evaluation_id)
            summary = summarize(e.data for e in events)

        files = [
            SubmissionFileResponse(
                field_id=f.field_id,
                file_name=f.file_name,
                hash=content.hash,
                media_type=content.media_type,
            )
            for f, content in await self.submission_repo.list_files(db, submission_id)
        ]

        return SubmissionResponse(
            submission_id=submission.submission_id,
            contest=contest.name,
            problem=problem.name,
            username=owner.username,
            created_at=submission.created_at,
            files=files,
            official_evaluation=EvaluationResponse.model_validate(evaluation) if evaluation else None,
            pending=evaluation is None or evaluation.is_pending,
            columns=submission_list_columns(awards),
            summary=summary_row(awards, summary),
            feedback=feedback_table(summary),
        )

    async def list_official_events(self, db: AsyncSession, submission_id: int) -> List[EvaluationEventResponse]:
        """공식 채점의 이벤트 목록 (채점이 없으면 빈 목록)"""
        await self.get_submission_model(db, submission_id)
        evaluation = await self.evaluation_repo.get_official(db, submission_id)
        if evaluation is None:
            return []
        events = await self.evaluation_repo.list_events(db, evaluation.evaluation_id)
        return [EvaluationEventResponse.model_validate(e) for e in events]

    async def reevaluate(
        self, db: AsyncSession, dispatcher: EvaluationDispatcher, submission_id: int
    ) -> EvaluationResponse:
        await self.get_submission_model(db, submission_id)
        evaluation = await dispatcher.reevaluate(db, submission_id)
        return EvaluationResponse.model_validate(evaluation)

    # -------------------- #
    # 외부 채점기
    # -------------------- #

    async def _get_pending_evaluation(self, db: AsyncSession, evaluation_id: int) -> Evaluation:
        evaluation = await self.evaluation_repo.get_by_id(db, evaluation_id)
        if not evaluation:
            raise NotFoundError(f"채점을 찾을 수 없습니다: {evaluation_id}")
        if not evaluation.is_pending:
            raise EvaluationClosedError(
                f"이미 끝난 채점입니다: evaluation_id={evaluation_id} ({evaluation.status.value})"
            )
        return evaluation

    async def push_events(self, db: AsyncSession, evaluation_id: int, events: List[dict]) -> List[EvaluationEventResponse]:
        """
        이벤트를 순서대로 추가합니다.
        하나라도 형식이 잘못되면 아무것도 저장하지 않습니다. (InvalidEventError)
        """
        await self._get_pending_evaluation(db, evaluation_id)
        for data in events:
            parse_event(data)

        stored = [
            EvaluationEventResponse.model_validate(event)
            for event in await self.evaluation_repo.append_events(db, evaluation_id, events)
        ]
        logger.info(f"외부 채점 이벤트 {len(stored)}건 추가: evaluation_id={evaluation_id}")
        return stored

    async def complete(self, db: AsyncSession, evaluation_id: int) -> EvaluationResponse:
        await self._get_pending_evaluation(db, evaluation_id)
        evaluation = await self.evaluation_repo.mark_finished(db, evaluation_id, EvaluationStatus.SUCCESS)
        return EvaluationResponse.model_validate(evaluation)

    async def fail(self, db: AsyncSession, evaluation_id: int, error: str) -> EvaluationResponse:
        await self._get_pending_evaluation(db, evaluation_id)
        evaluation = await self.evaluation_repo.mark_finished(
            db, evaluation_id, EvaluationStatus.ERROR, error=error
        )
        return EvaluationResponse.model_validate(evaluation)
