"""동기부여 서비스 — 명언 검색 기반 메시지 생성, 감정 추론, 이력.

Motivation Service — Quote-grounded motivational messages, emotion
inference from free text, daily motivation, and per-user history.
"""

import logging
import random
import re
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.llm.json_extract import JSONExtractionError, extract_json_object
from app.llm.ollama_client import ollama_client
from app.models.motivation import MotivationHistory, MotivationQuote
from app.prompts.motivation import build_emotion_prompt, build_motivation_prompt
from app.repositories.motivation_repository import (
    motivation_history_repository,
    motivation_quote_repository,
)
from app.schemas.motivation import (
    MotivationHistoryResponse,
    MotivationRequest,
    MotivationResponse,
)
from app.utils.exceptions import LLMServiceError

logger = logging.getLogger(__name__)

DEFAULT_EMOTION: str = "neutral"
FALLBACK_MOTIVATION: str = "You're doing great. Keep moving forward!"

# 명언 저장소가 비었을 때 사용하는 기본 목록 (Used when no quotes have been imported)
BUILTIN_QUOTES: list[str] = [
    "Success is the sum of small efforts repeated day in and day out.",
    "The expert in anything was once a beginner.",
    "Don't watch the clock; do what it does. Keep going.",
    "Learning never exhausts the mind.",
    "The beautiful thing about learning is that no one can take it away from you.",
    "It always seems impossible until it's done.",
    "Study while others are sleeping; work while others are loafing.",
    "You don't have to be great to start, but you have to start to be great.",
]

GUEST_USER_ID: str = "guest"

# 한 단어 감정만 허용 (One word, fits motivation_history.emotion)
_EMOTION_WORD = re.compile(r"[A-Za-z][A-Za-z\-]{0,31}")


class MotivationService:
    """동기부여 메시지 비즈니스 로직 서비스."""

    async def infer_emotion(self, user_text: str) -> str:
        """자유 텍스트에서 한 단어 감정을 추론합니다.

        Infer a one-word emotion from free text. Model output without a JSON
        object, or whose ``emotion`` is not a single short word, yields "neutral".
        LLM transport errors propagate.
        """
        raw: str = await ollama_client.generate(build_emotion_prompt(user_text))
        try:
            data = extract_json_object(raw)
        except JSONExtractionError:
            logger.info("No emotion JSON in model output; using %s", DEFAULT_EMOTION)
            return DEFAULT_EMOTION

        emotion = data.get("emotion")
        if not isinstance(emotion, str) or not _EMOTION_WORD.fullmatch(emotion.strip()):
            logger.info("Model emotion %r is not a single word; using %s", emotion, DEFAULT_EMOTION)
            return DEFAULT_EMOTION
        return emotion.strip().lower()

    async def daily_motivation(self, db: AsyncSession) -> str:
        """오늘의 동기부여 — 저장된 명언 중 무작위, 없으면 기본 목록.

        A random stored quote; the built-in list when the store is empty.
        """
        quote: MotivationQuote | None = await motivation_quote_repository.get_random(db)
        if quote is not None and quote.quote:
            return quote.quote
        return random.choice(BUILTIN_QUOTES) if BUILTIN_QUOTES else FALLBACK_MOTIVATION

    async def _generate_message(
        self,
        db: AsyncSession,
        subject: str,
        emotion: str | None,
        progress: str | None,
    ) -> str:
        quotes: list[MotivationQuote] = await motivation_quote_repository.find_relevant(
            db, subject, [t for t in (emotion, progress) if t], limit=3
        )
        if not quotes:
            raise LLMServiceError("No matching quotes found for motivation")

        prompt: str = build_motivation_prompt(
            subject, [q.quote for q in quotes], emotion, progress
        )
        raw: str = await ollama_client.generate(prompt)
        try:
            data = extract_json_object(raw)
        except JSONExtractionError as exc:
            raise LLMServiceError("No valid JSON in motivation response") from exc

        message = data.get("motivation")
        if not isinstance(message, str) or not message.strip():
            raise LLMServiceError("Motivation response has no message")
        return message.strip()

    async def generate_motivation(
        self,
        db: AsyncSession,
        data: MotivationRequest,
        user_id: str | None = None,
    ) -> MotivationResponse:
        """개인화된 동기부여 메시지를 생성하고 이력에 기록합니다.

        Build a personalized message from retrieved quotes. Falls back to the
        daily motivation when retrieval finds nothing or the LLM fails.
        Every served message is recorded in motivation history.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 요청 데이터 (Subject, optional emotion/progress/feedback)
            user_id: 사용자 ID, 없으면 "guest" (Recorded user id, "guest" when anonymous)
        """
        emotion: str | None = data.emotion
        if not emotion and data.user_feedback:
            try:
                emotion = await self.infer_emotion(data.user_feedback)
            except LLMServiceError:
                emotion = DEFAULT_EMOTION

        try:
            message: str = await self._generate_message(db, data.subject, emotion, data.progress)
        except LLMServiceError as exc:
            logger.warning("Motivation generation fell back to daily quote: %s", exc.detail)
            message = await self.daily_motivation(db)

        await motivation_history_repository.create(
            db,
            {
                "user_id": user_id or GUEST_USER_ID,
                "subject": data.subject,
                "emotion": emotion,
                "progress": data.progress,
                "motivation": message,
            },
        )
        return MotivationResponse(motivation=message, emotion=emotion)

    async def get_history(self, db: AsyncSession, user_id: str) -> list[MotivationHistoryResponse]:
        records: Sequence[MotivationHistory] = await motivation_history_repository.get_by_user(
            db, user_id
        )
        return [
            MotivationHistoryResponse(
                id=str(r.id),
                user_id=r.user_id,
                subject=r.subject,
                emotion=r.emotion,
                progress=r.progress,
                motivation=r.motivation,
                created_at=r.created_at,
            )
            for r in records
        ]


# 싱글턴 인스턴스 — Singleton instance
motivation_service: MotivationService = MotivationService()
