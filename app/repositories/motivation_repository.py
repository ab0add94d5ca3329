"""동기부여 레포지토리.

Motivation repository — Handles motivation_quotes and motivation_history DB queries.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select, type_coerce
from sqlalchemy.dialects.postgresql import JSONB, array
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.motivation import MotivationHistory, MotivationQuote
from app.repositories.base import BaseRepository

# 태그 검색 시 한 번에 읽는 행 수 (Rows per batch when scanning tags outside PostgreSQL)
_TAG_SCAN_BATCH: int = 200


class MotivationQuoteRepository(BaseRepository[MotivationQuote]):

    def __init__(self) -> None:
        super().__init__(MotivationQuote)

    async def find_relevant(
        self,
        db: AsyncSession,
        subject: str,
        tags: list[str],
        limit: int = 3,
    ) -> list[MotivationQuote]:
        """과목 또는 태그가 일치하는 명언을 검색합니다.

        Return up to ``limit`` quotes whose subject equals ``subject``
        (case-insensitive) or whose topic tags contain any of ``tags``.

        On PostgreSQL the tag match is a JSONB ``?|`` query. Other databases
        scan the table in batches of ``_TAG_SCAN_BATCH`` rows.
        """
        wanted: set[str] = {t.strip().lower() for t in tags if t and t.strip()}
        subject_key: str = subject.strip().lower()

        by_subject: Select = (
            select(MotivationQuote)
            .where(func.lower(MotivationQuote.subject) == subject_key)
            .limit(limit)
        )
        matches: list[MotivationQuote] = list((await db.execute(by_subject)).scalars().all())
        if len(matches) >= limit or not wanted:
            return matches[:limit]

        seen: set[UUID] = {q.id for q in matches}
        if db.get_bind().dialect.name == "postgresql":
            by_tags: Select = (
                select(MotivationQuote)
                .where(type_coerce(MotivationQuote.topics, JSONB).has_any(array(sorted(wanted))))
                .limit(limit - len(matches))
            )
            if seen:
                by_tags = by_tags.where(MotivationQuote.id.notin_(seen))
            matches.extend((await db.execute(by_tags)).scalars().all())
            return matches

        offset = 0
        while len(matches) < limit:
            batch: Select = (
                select(MotivationQuote)
                .order_by(MotivationQuote.id)
                .offset(offset)
                .limit(_TAG_SCAN_BATCH)
            )
            candidates = (await db.execute(batch)).scalars().all()
            if not candidates:
                break
            offset += len(candidates)
            for quote in candidates:
                if quote.id in seen:
                    continue
                quote_tags = {str(t).lower() for t in (quote.topics or [])}
                if quote_tags & wanted:
                    matches.append(quote)
                    if len(matches) >= limit:
                        break
        return matches

    async def get_random(self, db: AsyncSession) -> MotivationQuote | None:
        result = await db.execute(select(MotivationQuote).order_by(func.random()).limit(1))
        return result.scalar_one_or_none()


class MotivationHistoryRepository(BaseRepository[MotivationHistory]):

    def __init__(self) -> None:
        super().__init__(MotivationHistory)

    async def get_by_user(self, db: AsyncSession, user_id: str) -> Sequence[MotivationHistory]:
        """사용자 이력 — 최신순 (User history, newest first)."""
        return await self.get_all(
            db,
            filters={"user_id": user_id},
            order_by=MotivationHistory.created_at.desc(),
        )


motivation_quote_repository: MotivationQuoteRepository = MotivationQuoteRepository()
motivation_history_repository: MotivationHistoryRepository = MotivationHistoryRepository()
