"""학습 계획 레포지토리.

Study plan repository — Handles study_plans and plan_versions DB queries.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.plan import PlanVersion, StudyPlan
from app.repositories.base import BaseRepository


class PlanRepository(BaseRepository[StudyPlan]):

    def __init__(self) -> None:
        super().__init__(StudyPlan)

    async def get_by_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> Sequence[StudyPlan]:
        """사용자의 계획 목록 — 최신순 (User's plans, newest first)."""
        query: Select = (
            select(StudyPlan)
            .where(StudyPlan.user_id == user_id)
            .order_by(StudyPlan.created_at.desc())
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_latest_by_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> StudyPlan | None:
        query: Select = (
            select(StudyPlan)
            .where(StudyPlan.user_id == user_id)
            .order_by(StudyPlan.created_at.desc())
            .limit(1)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def add_version(
        self,
        db: AsyncSession,
        plan_id: UUID,
        previous_plan: dict,
        feedback: str,
    ) -> PlanVersion:
        """수정 전 계획 문서를 이력으로 저장합니다.

        Store the plan document that is about to be replaced by a revision.
        """
        version = PlanVersion(plan_id=plan_id, plan=previous_plan, feedback=feedback)
        db.add(version)
        await db.flush()
        await db.refresh(version)
        return version

    async def get_versions(
        self,
        db: AsyncSession,
        plan_id: UUID,
    ) -> Sequence[PlanVersion]:
        query: Select = (
            select(PlanVersion)
            .where(PlanVersion.plan_id == plan_id)
            .order_by(PlanVersion.created_at.asc())
        )
        result = await db.execute(query)
        return result.scalars().all()


plan_repository: PlanRepository = PlanRepository()
