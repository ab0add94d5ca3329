"""앱 인증 라우터 — 회원가입, 로그인, 내 정보.

App Auth Router — Sign-up, login and current user endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.auth import AuthResponse, LoginRequest, SignupRequest, UserResponse
from app.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    data: SignupRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """회원가입 — 계정 생성 후 토큰 발급.

    Create an account and return a token with the user's profile.
    """
    result: AuthResponse = await auth_service.signup(db, data)
    await db.commit()
    return result


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """로그인 — 이메일/비밀번호 확인 후 토큰 발급."""
    return await auth_service.login(db, data)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """현재 사용자 프로필 조회."""
    return auth_service.build_user_response(current_user)
