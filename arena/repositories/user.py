import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from arena.models.contest import Participation
from arena.models.user import User, UserPrivilege

logger = logging.getLogger(__name__)


class UserRepository:
    """
    사용자 데이터베이스 접근을 담당하는 Repository 클래스
    """

    async def create(
        self,
        db: AsyncSession,
        *,
        username: str,
        name: str,
        token: str,
        privilege: UserPrivilege = UserPrivilege.USER,
    ) -> Optional[User]:
        """
        새로운 사용자를 생성합니다.

        Returns:
            생성된 사용자 객체 또는 None (username / token 중복)
        """
        try:
            user = User(username=username, name=name, token=token, privilege=privilege)
            db.add(user)
            await db.commit()
            await db.refresh(user)

            logger.info(f"사용자 생성 완료: {user.username}")
            return user

        except IntegrityError as ie:
            await db.rollback()
            logger.error(f"사용자 생성 무결성 오류 (username={username}): {ie}")
            return None

    async def add(
        self,
        db: AsyncSession,
        *,
        username: str,
        name: str,
        token: str,
        privilege: UserPrivilege = UserPrivilege.USER,
    ) -> User:
        """
        사용자를 세션에 추가합니다. (commit 은 호출하는 쪽에서, 대회 가져오기용)
        """
        user = User(username=username, name=name, token=token, privilege=privilege)
        db.add(user)
        await db.flush()
        return user

    async def get_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        """
        ID로 사용자를 조회합니다.
        """
        result = await db.execute(select(User).where(User.user_id == user_id))
        return result.scalars().first()

    async def get_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        """
        username 으로 사용자를 조회합니다.
        """
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalars().first()

        if not user:
            logger.warning(f"사용자를 찾을 수 없음: {username}")

        return user

    async def get_all(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> List[User]:
        """
        모든 사용자를 조회합니다.
        """
        result = await db.execute(
            select(User).order_by(User.user_id).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def exists_by_username(self, db: AsyncSession, username: str) -> bool:
        result = await db.execute(select(User.user_id).where(User.username == username))
        return result.first() is not None

    async def delete(self, db: AsyncSession, username: str) -> bool:
        """
        사용자를 삭제합니다.
        """
        try:
            user = await self.get_by_username(db, username)
            if not user:
                return False

            participations = await db.execute(select(Participation).where(Participation.user_id == user.user_id))
            for participation in participations.scalars().all():
                await db.delete(participation)

            await db.delete(user)
            await db.commit()
            logger.info(f"사용자 삭제 완료: {username}")
            return True

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"사용자 삭제 오류 (username={username}): {e}")
            raise
