"""동기부여 명언 임포트 스크립트 — JSONL 파일을 지식베이스로 적재.

Seed script — Imports motivational quotes from a JSONL file.
Each non-blank line is one JSON document:
    {"quote": "...", "author": "...", "topics": ["stressed"], "subject": "math"}

Usage:
    python -m app.seed [path/to/eduplanner_quotes.jsonl]

Malformed lines are logged and skipped; the rest are committed together.
"""

import asyncio
import json
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.database import async_session, engine, Base
from app.models import MotivationQuote  # noqa: F401 — register all models with metadata
from app.repositories.motivation_repository import motivation_quote_repository

logger = logging.getLogger(__name__)

DEFAULT_QUOTES_FILE: Path = Path("eduplanner_quotes.jsonl")

# author/subject 컬럼 길이 (String(255) columns)
_MAX_NAME_CHARS: int = 255


def parse_quote_line(line: str) -> dict[str, Any] | None:
    """JSONL 한 줄을 명언 레코드 데이터로 변환합니다.

    Return the column data for one line, or None for a blank line.

    Raises:
        ValueError: JSON이 아니거나 quote 필드가 없음, 잘못된 author/subject
                    (Not JSON, no quote text, or an invalid author/subject)
    """
    if not line.strip():
        return None
    doc = json.loads(line)
    if not isinstance(doc, dict) or not isinstance(doc.get("quote"), str) or not doc["quote"].strip():
        raise ValueError("line has no quote text")

    author = doc.get("author")
    if author is not None and (not isinstance(author, str) or len(author) > _MAX_NAME_CHARS):
        raise ValueError("author must be a string of at most 255 characters")
    subject = doc.get("subject")
    if subject is not None and (not isinstance(subject, str) or len(subject.strip()) > _MAX_NAME_CHARS):
        raise ValueError("subject must be a string of at most 255 characters")

    topics = doc.get("topics") or []
    if not isinstance(topics, list):
        topics = [topics]
    return {
        "quote": doc["quote"].strip(),
        "author": (author.strip() or None) if author else None,
        "topics": [str(t).strip().lower() for t in topics if str(t).strip()],
        "subject": subject.strip().lower() if isinstance(subject, str) and subject.strip() else None,
    }


async def import_quotes(db: AsyncSession, lines: Iterable[str]) -> int:
    """명언 줄들을 DB에 추가하고 추가된 개수를 반환합니다.

    Insert every valid line; returns the number of quotes inserted.
    Does not commit.
    """
    inserted = 0
    for line_no, line in enumerate(lines, start=1):
        try:
            data = parse_quote_line(line)
        except ValueError as exc:
            # json.JSONDecodeError는 ValueError의 하위 클래스
            logger.error("Error inserting line %d: %s", line_no, exc)
            continue
        if data is None:
            continue
        await motivation_quote_repository.create(db, data)
        inserted += 1
    return inserted


async def seed(path: Path = DEFAULT_QUOTES_FILE) -> None:
    """테이블을 생성하고 명언 파일을 임포트합니다.

    Create tables if they don't exist, then import the quotes file.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    with path.open(encoding="utf-8") as handle:
        async with async_session() as db:
            inserted = await import_quotes(db, handle)
            await db.commit()

    logger.info("Motivational quotes imported: %d", inserted)
    print(f"Imported {inserted} motivational quotes from {path}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed(Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_QUOTES_FILE))
