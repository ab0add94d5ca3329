"""동기부여 관련 SQLAlchemy ORM 모델 정의.

Motivation SQLAlchemy ORM model definitions.

Tables:
    - motivation_quotes: 동기부여 명언 지식베이스 (Quote knowledge base used for retrieval)
    - motivation_history: 사용자에게 제공한 메시지 이력 (Messages served to users)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, JSONDocument


class MotivationQuote(Base):
    """동기부여 명언 모델.

    Quote document imported from the JSONL knowledge base (``python -m app.seed``).

    Attributes:
        quote: 명언 본문 (Quote text)
        author: 저자 (Author, optional)
        topics: 감정/진행 태그 목록 (Tags such as "stressed", "behind")
        subject: 관련 과목 (Related subject, lower-cased, optional)
    """

    __tablename__ = "motivation_quotes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    quote: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 태그 목록 — JSON list of lower-cased tags
    topics: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    subject: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class MotivationHistory(Base):
    """동기부여 메시지 이력 모델.

    One record per motivational message served.
    user_id is a plain string because guests are recorded as "guest".
    """

    __tablename__ = "motivation_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    subject: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emotion: Mapped[str | None] = mapped_column(String(64), nullable=True)
    progress: Mapped[str | None] = mapped_column(String(255), nullable=True)
    motivation: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
