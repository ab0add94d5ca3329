"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 사용자 (User accounts)
    plan: 학습 계획 및 수정 이력 (Study plans and revision history)
    motivation: 동기부여 명언 및 이력 (Motivation quotes and history)
"""

from app.models.user import User
from app.models.plan import StudyPlan, PlanVersion
from app.models.motivation import MotivationQuote, MotivationHistory

__all__ = [
    "User",
    "StudyPlan", "PlanVersion",
    "MotivationQuote", "MotivationHistory",
]
