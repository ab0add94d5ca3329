"""학습 계획 서비스 — 계획 생성, 피드백 수정, 진행 상태 관리.

Plan Service — Business logic for LLM plan generation, feedback revision,
progress tracking and completion accounting.
"""

import logging
from typing import Any, Sequence
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.llm.json_extract import JSONExtractionError, extract_json_object, unwrap
from app.llm.ollama_client import ollama_client
from app.models.plan import PlanVersion, StudyPlan
from app.models.user import User
from app.prompts.plan import build_generation_prompt, build_revision_prompt, total_days_for
from app.repositories.plan_repository import plan_repository
from app.schemas.plan import (
    GeneratePlanRequest,
    PlanDocument,
    PlanResponse,
    PlanVersionResponse,
    ProgressSummaryResponse,
    UpdatePlanRequest,
)
from app.utils.exceptions import BadRequestError, ForbiddenError, LLMServiceError, NotFoundError
from app.utils.progress import day_completion, day_key, plan_completion, summarize_plans

logger = logging.getLogger(__name__)


def parse_plan_output(
    raw: str,
    subject: str | None = None,
    level: str | None = None,
    total_days: int | None = None,
) -> dict[str, Any]:
    """모델 출력에서 계획 문서를 추출합니다.

    Extract the plan document from raw model output, unwrap the
    ``study_plan`` envelope, validate it against PlanDocument, and fill
    ``subject`` / ``level`` / ``total_days`` from the request when the model
    left them out. Single-string topics or activities become one-item lists.

    Raises:
        LLMServiceError: JSON이 없거나 계획 구조가 잘못됨 (No JSON or invalid plan structure)
    """
    try:
        extracted: dict[str, Any] = unwrap(extract_json_object(raw), "study_plan")
    except JSONExtractionError as exc:
        raise LLMServiceError(f"Failed to generate study plan: {exc}") from exc

    try:
        document: PlanDocument = PlanDocument.model_validate(extracted)
    except ValidationError as exc:
        logger.warning("Model output failed plan validation: %s", exc.errors()[:3])
        raise LLMServiceError("Failed to generate study plan: invalid study plan structure") from exc

    data: dict[str, Any] = document.model_dump(mode="json", exclude_none=True)

    if subject and not data.get("subject"):
        data["subject"] = subject
    if level and not data.get("level"):
        data["level"] = level
    if total_days and not data.get("total_days"):
        data["total_days"] = total_days
    return data


class PlanService:
    """학습 계획 비즈니스 로직 서비스."""

    def build_response(self, plan: StudyPlan) -> PlanResponse:
        progress: dict[str, Any] = plan.progress or {}
        days = (plan.plan or {}).get("days") or []
        return PlanResponse(
            id=str(plan.id),
            user_id=str(plan.user_id) if plan.user_id else None,
            plan=plan.plan,
            progress=progress,
            completion=plan_completion(plan.plan, progress),
            day_completion={
                day_key(day.get("day")): day_completion(day, progress)
                for day in days
                if isinstance(day, dict)
            },
            created_at=plan.created_at,
            updated_at=plan.updated_at,
        )

    def ensure_owner(self, user: User, user_id: UUID) -> None:
        """다른 사용자의 데이터 접근 차단 (Reject access to another user's data)."""
        if user.id != user_id:
            raise ForbiddenError("Cannot access another user's plans")

    async def get_owned_plan(
        self,
        db: AsyncSession,
        plan_id: UUID | str,
        user: User,
    ) -> StudyPlan:
        """현재 사용자가 소유한 계획을 조회합니다.

        Raises:
            BadRequestError: 잘못된 UUID 형식 (Malformed plan id)
            NotFoundError: 계획 없음 (Plan not found)
            ForbiddenError: 다른 사용자의 계획 (Plan belongs to someone else)
        """
        if isinstance(plan_id, str):
            try:
                plan_id = UUID(plan_id)
            except ValueError:
                raise BadRequestError("Invalid plan id")

        plan: StudyPlan | None = await plan_repository.get_by_id(db, plan_id)
        if plan is None:
            raise NotFoundError("Plan not found")
        if plan.user_id != user.id:
            raise ForbiddenError("Cannot access another user's plan")
        return plan

    async def generate_plan(
        self,
        db: AsyncSession,
        data: GeneratePlanRequest,
        user: User,
    ) -> StudyPlan:
        """LLM으로 학습 계획을 생성하고 저장합니다.

        Generate a study plan with the LLM and persist it for the user.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 계획 생성 요청 (Subject, level, duration, daily time)
            user: 계획 소유자 (Plan owner)

        Returns:
            StudyPlan: 저장된 계획 (Persisted plan row)

        Raises:
            LLMServiceError: LLM 호출 실패 또는 응답 파싱 실패
                             (LLM call failed or output had no usable plan)
        """
        logger.info("Generating plan for user %s (%s, %s)", user.id, data.subject, data.level)
        prompt: str = build_generation_prompt(
            data.subject, data.level, data.duration, data.daily_time, data.goals
        )
        raw: str = await ollama_client.generate(prompt)
        plan_data: dict[str, Any] = parse_plan_output(
            raw, data.subject, data.level, total_days_for(data.duration)
        )
        logger.info("Generated plan with %d days", len(plan_data["days"]))

        return await plan_repository.create(
            db, {"user_id": user.id, "plan": plan_data, "progress": {}}
        )

    async def update_plan(
        self,
        db: AsyncSession,
        data: UpdatePlanRequest,
        user: User,
    ) -> dict[str, Any]:
        """사용자 피드백으로 계획을 수정합니다.

        Revise a plan from free-text feedback. The replaced document and the
        feedback are appended to the plan's version history. Progress is kept.
        """
        plan: StudyPlan = await self.get_owned_plan(db, data.plan_id, user)

        prompt: str = build_revision_prompt(plan.plan, data.feedback)
        raw: str = await ollama_client.generate(prompt)
        revised: dict[str, Any] = parse_plan_output(
            raw,
            subject=plan.plan.get("subject"),
            level=plan.plan.get("level"),
        )

        await plan_repository.add_version(db, plan.id, plan.plan, data.feedback)
        await plan_repository.update(db, plan.id, {"plan": revised})
        return revised

    async def list_plans(
        self,
        db: AsyncSession,
        user_id: UUID,
        user: User,
    ) -> Sequence[StudyPlan]:
        self.ensure_owner(user, user_id)
        return await plan_repository.get_by_user(db, user_id)

    async def get_latest_plan(
        self,
        db: AsyncSession,
        user_id: UUID,
        user: User,
    ) -> StudyPlan:
        self.ensure_owner(user, user_id)
        plan: StudyPlan | None = await plan_repository.get_latest_by_user(db, user_id)
        if plan is None:
            raise NotFoundError("No plans found")
        return plan

    async def delete_plan(
        self,
        db: AsyncSession,
        plan_id: UUID,
        user: User,
    ) -> None:
        plan: StudyPlan = await self.get_owned_plan(db, plan_id, user)
        await plan_repository.delete(db, plan.id)

    async def update_progress(
        self,
        db: AsyncSession,
        plan_id: UUID,
        progress: dict[str, dict[str, bool]],
        user: User,
    ) -> StudyPlan:
        """진행 맵을 통째로 교체합니다.

        Replace the plan's progress map. Keys are not checked against the
        plan; dangling indices are stored and ignored by completion accounting.
        """
        plan: StudyPlan = await self.get_owned_plan(db, plan_id, user)
        updated: StudyPlan | None = await plan_repository.update(
            db, plan.id, {"progress": dict(progress)}
        )
        if updated is None:
            raise NotFoundError("Plan not found")
        return updated

    async def get_versions(
        self,
        db: AsyncSession,
        plan_id: UUID,
        user: User,
    ) -> list[PlanVersionResponse]:
        plan: StudyPlan = await self.get_owned_plan(db, plan_id, user)
        versions: Sequence[PlanVersion] = await plan_repository.get_versions(db, plan.id)
        return [
            PlanVersionResponse(
                id=str(v.id), plan=v.plan, feedback=v.feedback, created_at=v.created_at
            )
            for v in versions
        ]

    async def progress_summary(
        self,
        db: AsyncSession,
        user_id: UUID,
        user: User,
    ) -> ProgressSummaryResponse:
        """사용자 전체 계획의 진행 요약.

        Cross-plan summary: totals, per-subject average completion, achievements.
        """
        plans: Sequence[StudyPlan] = await self.list_plans(db, user_id, user)
        summary: dict[str, Any] = summarize_plans([(p.plan, p.progress) for p in plans])
        return ProgressSummaryResponse(**summary)


# 싱글턴 인스턴스 — Singleton instance
plan_service: PlanService = PlanService()
