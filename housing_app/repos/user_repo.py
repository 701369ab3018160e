from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from models.enums import UserRole
from models.models import User


class UserRepo:
    def __init__(self, db):
        self.db = db

    async def by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        email_payload = email.strip().lower()
        result = await self.db.execute(select(User).where(User.email == email_payload))
        return result.scalar_one_or_none()

    async def list_users(
        self, role: UserRole | None = None, offset: int = 0, limit: int = 20
    ) -> tuple[list[User], int]:
        stmt = select(User)
        count_stmt = select(func.count(User.id))
        if role is not None:
            stmt = stmt.where(User.role == role)
            count_stmt = count_stmt.where(User.role == role)
        result = await self.db.execute(
            stmt.order_by(User.id).offset(offset).limit(limit)
        )
        total = (await self.db.execute(count_stmt)).scalar_one()
        return list(result.scalars().all()), total

    async def pending_landlords(self) -> list[User]:
        result = await self.db.execute(
            select(User)
            .where(User.role == UserRole.LANDLORD, User.approved.is_(False))
            .order_by(User.created_at)
        )
        return list(result.scalars().all())

    async def count_by_role(self) -> dict[str, int]:
        result = await self.db.execute(
            select(User.role, func.count(User.id)).group_by(User.role)
        )
        counts = {role.value: 0 for role in UserRole}
        for role, count in result.all():
            counts[UserRole(role).value] = count
        return counts

    async def create(self, user: User) -> User:
        if user.id is not None:
            raise ValueError("create() called with existing user, use save() instead")
        self.db.add(user)
        return await self._commit_and_refresh(user)

    async def save(self, user: User) -> User:
        self.db.add(user)
        return await self._commit_and_refresh(user)

    async def delete(self, user_id: int) -> bool:
        try:
            result = await self.db.execute(delete(User).where(User.id == user_id))
            await self.db.commit()
            return result.rowcount > 0
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _commit_and_refresh(self, user: User) -> User:
        try:
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except SQLAlchemyError:
            await self.db.rollback()
            raise
