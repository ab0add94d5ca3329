"""앱 학습 계획 라우터 — 생성, 수정, 조회, 삭제, 진행 상태.

App Plan Router — Plan generation, feedback revision, history, and progress.
Paths keep the names the mobile client calls (including legacy aliases).
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.plan import (
    GeneratePlanRequest,
    GeneratePlanResponse,
    PlanResponse,
    PlanVersionResponse,
    ProgressSummaryResponse,
    ProgressUpdateRequest,
    UpdatePlanRequest,
    UpdatePlanResponse,
)
from app.services.plan_service import plan_service

router: APIRouter = APIRouter()


@router.post("/generate-plan", response_model=GeneratePlanResponse)
async def generate_plan(
    data: GeneratePlanRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> GeneratePlanResponse:
    """학습 계획 생성 — LLM 호출 후 저장.

    Generate a study plan with the LLM and store it for the current user.
    """
    plan = await plan_service.generate_plan(db, data, current_user)
    await db.commit()
    return GeneratePlanResponse(plan=plan.plan, plan_id=str(plan.id))


@router.api_route("/update-plan", methods=["POST", "PUT"], response_model=UpdatePlanResponse)
async def update_plan(
    data: UpdatePlanRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> UpdatePlanResponse:
    """피드백 기반 계획 수정 — 이전 버전은 이력에 보관."""
    revised = await plan_service.update_plan(db, data, current_user)
    await db.commit()
    return UpdatePlanResponse(plan=revised)


@router.get("/plans/{user_id}", response_model=list[PlanResponse])
@router.get("/study-plan-history/{user_id}", response_model=list[PlanResponse])
async def list_user_plans(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[PlanResponse]:
    """내 계획 목록 — 최신순."""
    plans = await plan_service.list_plans(db, user_id, current_user)
    return [plan_service.build_response(p) for p in plans]


@router.get("/study-plan-latest/{user_id}", response_model=PlanResponse)
async def get_latest_plan(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlanResponse:
    """가장 최근 계획 조회 — 없으면 404."""
    plan = await plan_service.get_latest_plan(db, user_id, current_user)
    return plan_service.build_response(plan)


@router.get("/plan/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlanResponse:
    plan = await plan_service.get_owned_plan(db, plan_id, current_user)
    return plan_service.build_response(plan)


@router.delete("/plan/{plan_id}")
async def delete_plan(
    plan_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict[str, str]:
    await plan_service.delete_plan(db, plan_id, current_user)
    await db.commit()
    return {"message": "Plan deleted"}


@router.patch("/plan/{plan_id}/progress", response_model=PlanResponse)
@router.patch("/update-plan-progress/{plan_id}", response_model=PlanResponse)
async def update_plan_progress(
    plan_id: UUID,
    data: ProgressUpdateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PlanResponse:
    """진행 맵 교체 — 완료율을 포함한 계획 반환.

    Replace the plan's progress map and return the plan with its completion.
    """
    plan = await plan_service.update_progress(db, plan_id, data.progress, current_user)
    await db.commit()
    return plan_service.build_response(plan)


@router.get("/plan/{plan_id}/versions", response_model=list[PlanVersionResponse])
async def list_plan_versions(
    plan_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[PlanVersionResponse]:
    """계획 수정 이력 — 오래된 순."""
    return await plan_service.get_versions(db, plan_id, current_user)


@router.get("/progress/{user_id}", response_model=ProgressSummaryResponse)
async def get_progress_summary(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ProgressSummaryResponse:
    """전체 진행 요약 — 과목별 평균 완료율과 업적."""
    return await plan_service.progress_summary(db, user_id, current_user)
