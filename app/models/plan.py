"""학습 계획 관련 SQLAlchemy ORM 모델 정의.

Study plan SQLAlchemy ORM model definitions.
The generated plan is stored as a JSON document exactly as extracted from
the LLM output, alongside the user's progress map.

Tables:
    - study_plans: 학습 계획 및 진행 맵 (Plan documents with progress map)
    - plan_versions: 피드백 수정 이력 (Previous plan documents replaced by feedback)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONDocument


class StudyPlan(Base):
    """학습 계획 모델 — LLM이 생성한 계획 문서와 진행 상태.

    Study plan model — LLM-generated plan document plus progress map.

    JSON Document Structure (plan):
        {
            "title": "Python beginner Study Plan",
            "subject": "Python",
            "level": "beginner",
            "duration": "2 weeks",
            "daily_time": "1 hour/day",
            "total_days": 14,
            "days": [
                {
                    "day": 1,
                    "topics": [{"topic_name": "Syntax", "sub_topics": ["Variables", "Types"]}],
                    "activities": [],
                    "time_required": 60
                },
                ...
            ]
        }
        토픽이 있는 날은 activities가 비어 있고, 복습일은 반대 (관례, 강제하지 않음).
        Topic days have empty activities and review days the reverse (convention only).

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 소유 사용자 FK (Owner; NULL for guest plans)
        plan: 계획 JSON 문서 (Plan document, see above)
        progress: 진행 맵 (Progress map, see app.utils.progress)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "study_plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소유 사용자 FK — 게스트 계획은 NULL (CASCADE: 사용자 삭제 시 계획도 삭제)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    # 계획 문서 — Plan JSON document as extracted from the model output
    plan: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    # 진행 맵 — {"day_1": {"topic_0": true, ...}, ...}
    progress: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    user = relationship("User", back_populates="plans")
    versions = relationship(
        "PlanVersion",
        back_populates="study_plan",
        cascade="all, delete-orphan",
        order_by="PlanVersion.created_at",
    )


class PlanVersion(Base):
    """계획 수정 이력 모델.

    Snapshot of a plan document taken right before a feedback revision
    replaced it.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        plan_id: 대상 계획 FK (Revised plan)
        plan: 수정 전 계획 문서 (Plan document before the revision)
        feedback: 수정을 요청한 사용자 피드백 (Feedback that triggered the revision)
        created_at: 수정 일시 (Revision timestamp)
    """

    __tablename__ = "plan_versions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("study_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    plan: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    feedback: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    study_plan = relationship("StudyPlan", back_populates="versions")
