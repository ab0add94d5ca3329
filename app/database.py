"""데이터베이스 엔진 및 세션 설정 모듈.

Database engine and session configuration module.
Sets up the async SQLAlchemy engine, session factory, and ORM base class.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

# 엔진 옵션 — 풀 설정은 asyncpg(PostgreSQL)에서만 적용
# Pool and prepared-statement options only apply to the asyncpg driver
_engine_kwargs: dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
if settings.DATABASE_URL.startswith("postgresql+asyncpg"):
    _engine_kwargs.update(
        pool_size=5,
        max_overflow=10,
        # Supavisor(트랜잭션 모드 풀러)에서 prepared statement 비활성화
        connect_args={"statement_cache_size": 0},
    )

# 비동기 데이터베이스 엔진 — Async database engine
engine: AsyncEngine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs)

# 비동기 세션 팩토리 — Async session factory
# expire_on_commit=False: 커밋 후에도 객체 속성 접근 가능 (Allows attribute access after commit without refresh)
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# JSON 문서 컬럼 타입 — PostgreSQL에서는 JSONB, 그 외(SQLite 테스트)에서는 JSON
# JSON document column type: JSONB on PostgreSQL, generic JSON elsewhere
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base class for all ORM models.
    All models inherit from this class to register with the metadata.
    """

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """비동기 데이터베이스 세션을 생성하고 요청 종료 시 닫습니다.

    FastAPI dependency that yields an async database session.
    The session is automatically closed after the request completes.

    Yields:
        AsyncSession: SQLAlchemy 비동기 세션 인스턴스 (Async session instance)
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
