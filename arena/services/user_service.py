import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.exceptions import ConflictError, NotFoundError
from arena.models.user import User
from arena.repositories.submission import SubmissionRepository
from arena.repositories.user import UserRepository
from arena.schemas import UserCreateRequest, UserListResponse, UserResponse

logger = logging.getLogger(__name__)


class UserService:
    """
    사용자 관련 비즈니스 로직을 담당하는 Service 클래스
    """

    def __init__(self, user_repository: Optional[UserRepository] = None):
        self.user_repository = user_repository or UserRepository()
        self.submission_repository = SubmissionRepository()

    async def create_user(self, db: AsyncSession, user_data: UserCreateRequest) -> UserResponse:
        """
        새로운 사용자를 생성합니다.

        Raises:
            ConflictError: username 또는 token 이 이미 사용 중인 경우
        """
        if await self.user_repository.exists_by_username(db, user_data.username):
            logger.warning(f"사용자 중복 생성 시도: {user_data.username}")
            raise ConflictError(f"이미 존재하는 사용자입니다: {user_data.username}")

        user = await self.user_repository.create(
            db,
            username=user_data.username,
            name=user_data.name,
            token=user_data.token,
            privilege=user_data.privilege,
        )
        if not user:
            raise ConflictError(f"사용자를 생성할 수 없습니다 (토큰 중복): {user_data.username}")

        logger.info(f"사용자 생성 서비스 완료: {user.username}")
        return UserResponse.model_validate(user)

    async def list_users(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> UserListResponse:
        users = await self.user_repository.get_all(db, skip=skip, limit=limit)
        return UserListResponse(
            users=[UserResponse.model_validate(u) for u in users],
            total=len(users),
        )

    async def get_user(self, db: AsyncSession, username: str) -> User:
        user = await self.user_repository.get_by_username(db, username)
        if not user:
            raise NotFoundError(f"사용자를 찾을 수 없습니다: {username}")
        return user

    async def resolve_user(self, db: AsyncSession, username: Optional[str]) -> Optional[User]:
        """username 이 없으면 익명(None), 있는데 존재하지 않으면 NotFoundError"""
        if not username:
            return None
        return await self.get_user(db, username)

    async def delete_user(self, db: AsyncSession, username: str) -> None:
        """
        사용자를 삭제합니다.

        Raises:
            NotFoundError: 사용자가 없는 경우
            ConflictError: 제출 기록이 있는 경우 (SQLite 는 외래 키를 강제하지 않으므로 직접 확인)
        """
        user = await self.get_user(db, username)
        if await self.submission_repository.exists_by_user(db, user.user_id):
            raise ConflictError(f"제출 기록이 있는 사용자는 삭제할 수 없습니다: {username}")

        try:
            deleted = await self.user_repository.delete(db, username)
        except IntegrityError as e:
            raise ConflictError(f"제출 기록이 있는 사용자는 삭제할 수 없습니다: {username}") from e
        if not deleted:
            raise NotFoundError(f"사용자를 찾을 수 없습니다: {username}")
        logger.info(f"사용자 삭제 서비스 완료: {username}")
