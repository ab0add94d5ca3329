"""사용자 레포지토리.

User repository — Handles users DB queries.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        """이메일(대소문자 무시)로 사용자를 조회합니다.

        Look up a user by email; the stored email is always lower-cased.
        """
        result = await db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()


user_repository: UserRepository = UserRepository()
