from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


class UserDirectory:
    """Looks up report targets in the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(self, user_id: int) -> User | None:
        if user_id <= 0:
            return None
        return await self.db.get(User, user_id)
