"""앱 동기부여 라우터 — 오늘의 명언, 메시지 생성, 감정 추론, 이력.

App Motivation Router. Daily motivation, generation and emotion inference
are open to guests; history requires authentication.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_optional_user
from app.database import get_db
from app.models.user import User
from app.schemas.motivation import (
    EmotionRequest,
    EmotionResponse,
    MotivationHistoryResponse,
    MotivationRequest,
    MotivationResponse,
)
from app.services.motivation_service import motivation_service
from app.services.plan_service import plan_service

router: APIRouter = APIRouter()


@router.get("/daily-motivation", response_model=MotivationResponse)
async def get_daily_motivation(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MotivationResponse:
    """오늘의 동기부여 명언."""
    return MotivationResponse(motivation=await motivation_service.daily_motivation(db))


@router.post("/generate-motivation", response_model=MotivationResponse)
@router.post("/motivation", response_model=MotivationResponse)
async def generate_motivation(
    data: MotivationRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User | None, Depends(get_optional_user)],
) -> MotivationResponse:
    """개인화 동기부여 메시지 생성 — 실패 시 오늘의 명언으로 대체."""
    user_id: str | None = str(current_user.id) if current_user else None
    result: MotivationResponse = await motivation_service.generate_motivation(db, data, user_id)
    await db.commit()
    return result


@router.post("/infer-emotion", response_model=EmotionResponse)
async def infer_emotion(data: EmotionRequest) -> EmotionResponse:
    """자유 텍스트에서 감정 추론."""
    return EmotionResponse(emotion=await motivation_service.infer_emotion(data.user_text))


@router.get("/motivation-history/{user_id}", response_model=list[MotivationHistoryResponse])
async def get_motivation_history(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[MotivationHistoryResponse]:
    """내 동기부여 이력 — 최신순."""
    plan_service.ensure_owner(current_user, user_id)
    return await motivation_service.get_history(db, str(user_id))
