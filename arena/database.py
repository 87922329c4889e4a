import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlmodel import SQLModel

from arena.core.config import settings
import arena.models  # noqa: F401  (모든 테이블을 metadata 에 등록)

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    # echo=settings.DEPLOY_PHASE == "dev", ORM 쿼리 로깅
)

async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@asynccontextmanager
async def get_async_session_context():
    """비동기 DB 세션 컨텍스트 매니저 (백그라운드 태스크 / CLI 용)"""
    async with async_session() as session:
        yield session


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """비동기 DB 세션 생성 - FastAPI Dependency Injection용"""
    session = async_session()
    try:
        yield session
    finally:
        await session.close()


async def init_db(bind: AsyncEngine = engine, drop: bool = False):
    """테이블 생성 (drop=True 이면 기존 테이블 삭제 후 재생성)"""
    async with bind.begin() as conn:
        if drop:
            logger.warning("기존 테이블을 모두 삭제합니다.")
            await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
