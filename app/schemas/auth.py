"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers sign-up, login, and current user info.
"""

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    """회원가입 요청 스키마.

    Sign-up request schema. Fields are optional at the schema level so that
    missing values produce the 400 messages the mobile client displays.

    Attributes:
        name: 표시 이름 (Display name)
        email: 로그인 이메일 (Login email, stored lower-cased)
        password: 비밀번호 (Plain text, will be bcrypt-hashed on server)
    """

    name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = None


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Attributes:
        email: 로그인 이메일 (Login email, case-insensitive)
        password: 비밀번호 (Plain text, compared to bcrypt hash)
    """

    email: str | None = None
    password: str | None = None


class UserResponse(BaseModel):
    """사용자 정보 응답 스키마 (User info in auth responses and GET /me)."""

    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    Returned after successful sign-up or login.

    Attributes:
        token: JWT 액세스 토큰 (Access token, default TTL: 7 days)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
        user: 사용자 정보 (Authenticated user)
    """

    token: str
    token_type: str = "bearer"
    user: UserResponse
