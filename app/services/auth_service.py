"""인증 서비스 — 회원가입, 로그인 비즈니스 로직.

Auth Service — Business logic for sign-up, login, and profile retrieval.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.user_repository import user_repository
from app.schemas.auth import AuthResponse, LoginRequest, SignupRequest, UserResponse
from app.utils.exceptions import (
    BadRequestError,
    DuplicateError,
    NotFoundError,
    UnauthorizedError,
)
from app.utils.jwt import create_access_token
from app.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    Issues a single access token per sign-up/login; there is no refresh flow.
    """

    def build_user_response(self, user: User) -> UserResponse:
        return UserResponse(id=str(user.id), name=user.name, email=user.email)

    def _issue_token(self, user: User) -> AuthResponse:
        """액세스 토큰을 발급하고 인증 응답을 만듭니다.

        Issue an access token for the user and wrap it in an AuthResponse.
        """
        token: str = create_access_token({"sub": str(user.id), "email": user.email})
        return AuthResponse(token=token, user=self.build_user_response(user))

    async def signup(
        self,
        db: AsyncSession,
        data: SignupRequest,
    ) -> AuthResponse:
        """회원가입을 처리합니다.

        Register a new user and return a token.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 회원가입 요청 데이터 (Sign-up request data)

        Returns:
            AuthResponse: 토큰 및 사용자 정보 (Token and user info)

        Raises:
            BadRequestError: 필수 값 누락 (Missing email, password or name)
            DuplicateError: 이미 등록된 이메일 (Email already registered)
        """
        if not data.email or not data.password:
            raise BadRequestError("Email and password are required")
        if not data.name or not data.name.strip():
            raise BadRequestError("Name is required")

        email: str = data.email.strip().lower()
        # 이메일 중복 확인 — Check email uniqueness
        if await user_repository.get_by_email(db, email) is not None:
            raise DuplicateError("Email already exists")

        try:
            user: User = await user_repository.create(
                db,
                {
                    "name": data.name.strip(),
                    "email": email,
                    "password_hash": hash_password(data.password),
                },
            )
        except IntegrityError:
            # 동시 가입 경합 — Concurrent sign-up with the same email
            await db.rollback()
            raise DuplicateError("Email already exists")

        logger.info("User created: %s", user.id)
        return self._issue_token(user)

    async def login(
        self,
        db: AsyncSession,
        data: LoginRequest,
    ) -> AuthResponse:
        """로그인을 처리합니다.

        Raises:
            BadRequestError: 필수 값 누락 (Missing email or password)
            NotFoundError: 등록되지 않은 이메일 (Unknown email)
            UnauthorizedError: 비밀번호 불일치 (Wrong password)
        """
        if not data.email or not data.password:
            raise BadRequestError("Email and password are required")

        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid credentials")

        return self._issue_token(user)


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
