"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.

Tables:
    - users: 사용자 계정 (User accounts, email is the login identifier)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class User(Base):
    """사용자 모델 — 모바일 앱 계정 정보.

    User model — Mobile app account information.
    Email is globally unique and stored lower-cased.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 표시 이름 (Display name)
        email: 로그인 이메일 (Login email, unique, lower-cased)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        plans: 사용자의 학습 계획 목록 (Study plans, cascade delete)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 표시 이름 — Display name shown in the app header
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 로그인 이메일 — Login email (전역 고유, globally unique)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    plans = relationship("StudyPlan", back_populates="user", cascade="all, delete-orphan")
