"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
Each test gets a fresh schema; the Ollama client is replaced per test.
"""

import os

# 앱 임포트 전에 테스트 DB 설정 — must be set before app.config is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["AXIOM_API_TOKEN"] = ""
os.environ["AXIOM_DATASET"] = ""

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.llm.ollama_client import ollama_client  # noqa: E402
from app.main import app  # noqa: E402
from app.models import *  # noqa: F401,F403,E402 — register all models with metadata
from app.utils.jwt import create_access_token  # noqa: E402
from app.utils.password import hash_password  # noqa: E402

# ---------------------------------------------------------------------------
# 샘플 계획 — 토픽일 2일 + 활동일 1일 (2 topic days + 1 activity day, 8 leaves)
# ---------------------------------------------------------------------------
SAMPLE_PLAN: dict = {
    "title": "Python beginner Study Plan",
    "subject": "Python",
    "level": "beginner",
    "duration": "1 week",
    "daily_time": "1 hour/day",
    "total_days": 7,
    "days": [
        {
            "day": 1,
            "topics": [{"topic_name": "Syntax", "sub_topics": ["Variables", "Types"]}],
            "activities": [],
            "time_required": 60,
        },
        {
            "day": 2,
            "topics": [
                {"topic_name": "Control flow", "sub_topics": ["if", "for"]},
                {"topic_name": "Functions", "sub_topics": []},
            ],
            "activities": [],
            "time_required": 60,
        },
        {
            "day": 3,
            "topics": [],
            "activities": ["Review quiz"],
            "time_required": 60,
        },
    ],
}


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 테스트마다 새 스키마를 생성합니다."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def fake_llm(monkeypatch) -> AsyncMock:
    """Ollama 호출을 대체합니다. 테스트에서 return_value/side_effect를 설정."""
    mock = AsyncMock(return_value="")
    monkeypatch.setattr(ollama_client, "generate", mock)
    return mock


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def user(db: AsyncSession):
    """테스트 사용자를 생성합니다."""
    from app.models.user import User
    u = User(name="Test Student", email="student@test.com", password_hash=hash_password("student123!"))
    db.add(u)
    await db.flush()
    await db.refresh(u)
    return u


@pytest_asyncio.fixture
async def other_user(db: AsyncSession):
    """다른 사용자를 생성합니다 (권한 테스트용)."""
    from app.models.user import User
    u = User(name="Other Student", email="other@test.com", password_hash=hash_password("other123!"))
    db.add(u)
    await db.flush()
    await db.refresh(u)
    return u


@pytest_asyncio.fixture
async def plan(db: AsyncSession, user):
    """사용자의 샘플 계획을 생성합니다."""
    from app.models.plan import StudyPlan
    p = StudyPlan(user_id=user.id, plan=SAMPLE_PLAN, progress={})
    db.add(p)
    await db.flush()
    await db.refresh(p)
    return p


async def make_plan(db: AsyncSession, user, plan: dict, progress: dict | None = None, age_minutes: int = 0):
    """계획을 직접 생성합니다. age_minutes로 생성 시각을 과거로 설정."""
    from app.models.plan import StudyPlan
    created = datetime.now(timezone.utc) - timedelta(minutes=age_minutes)
    p = StudyPlan(user_id=user.id, plan=plan, progress=progress or {}, created_at=created, updated_at=created)
    db.add(p)
    await db.flush()
    await db.refresh(p)
    return p


def make_token(user) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "email": user.email})


@pytest.fixture
def user_token(user) -> str:
    return make_token(user)


@pytest.fixture
def other_token(other_user) -> str:
    return make_token(other_user)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def fenced(payload: str) -> str:
    """모델 출력처럼 ```json 블록으로 감쌉니다."""
    return f"Here is your plan:\n```json\n{payload}\n```\nGood luck!"
