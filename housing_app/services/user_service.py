from fastapi import HTTPException

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from repos.user_repo import UserRepo
from schemas.schema import UserPublicSchema


class UserService:
    def __init__(self, db):
        self.repo: UserRepo = UserRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()
        self.paginate: PaginatePage = PaginatePage()

    async def _get_visible(self, user_id: int, current_user):
        await self.permission.check_owner_or_admin(current_user, user_id)
        user = await self.repo.by_id(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    async def list_users(self, role=None, page: int = 1, per_page: int = 20):
        async def handler():
            users, total = await self.repo.list_users(
                role=role, offset=self.paginate.offset(page, per_page), limit=per_page
            )
            return self.paginate.envelope(
                self.mapper.dump_many(users, UserPublicSchema), total, page, per_page
            )

        return await breaker.call(handler)

    async def get_user(self, user_id: int, current_user):
        async def handler():
            user = await self._get_visible(user_id, current_user)
            return {"success": True, "data": self.mapper.dump(user, UserPublicSchema)}

        return await breaker.call(handler)

    async def update_user(self, user_id: int, data, current_user):
        async def handler():
            user = await self._get_visible(user_id, current_user)
            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            for key, value in update_data.items():
                if key in ("first_name", "last_name") and value:
                    value = value.strip().title()
                setattr(user, key, value)
            await self.repo.save(user)
            return {"success": True, "data": self.mapper.dump(user, UserPublicSchema)}

        return await breaker.call(handler)

    async def delete_user(self, user_id: int, current_user):
        async def handler():
            await self._get_visible(user_id, current_user)
            await self.repo.delete(user_id)
            return {"success": True, "message": "User deleted"}

        return await breaker.call(handler)
