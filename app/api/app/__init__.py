"""앱 API 라우터 패키지 — 모바일 앱 엔드포인트 통합.

App API Router package — Aggregates all mobile-app endpoints into a single
router mounted under ``/api``.

Included routers:
    - auth: 회원가입/로그인/내 정보 (Sign-up, login, current user)
    - plans: 학습 계획 생성/수정/조회/진행 (Plan generation, revision, history, progress)
    - motivation: 동기부여 메시지/감정 추론/이력 (Motivation, emotion inference, history)
"""

from fastapi import APIRouter

from app.api.app.auth import router as auth_router
from app.api.app.plans import router as plans_router
from app.api.app.motivation import router as motivation_router

app_router: APIRouter = APIRouter()

# 모바일 클라이언트는 접두사 없는 경로를 호출 (The mobile client calls flat paths)
app_router.include_router(auth_router, tags=["Auth"])
app_router.include_router(plans_router, tags=["Study Plans"])
app_router.include_router(motivation_router, tags=["Motivation"])
