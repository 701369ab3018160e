from fastapi import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.mapper import ORMMapper
from core.paginate import PaginatePage
from models.models import StudentProfile
from repos.student_profile_repo import StudentProfileRepo
from schemas.schema import StudentProfileOut

PROFILE_EXISTS = "Student profile already exists"


class StudentProfileService:
    def __init__(self, db):
        self.repo: StudentProfileRepo = StudentProfileRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()
        self.paginate: PaginatePage = PaginatePage()

    async def _get_owned(self, profile_id: int, current_user) -> StudentProfile:
        profile = await self.repo.get_one(profile_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Student profile not found")
        await self.permission.check_owner_or_admin(current_user, profile.user_id)
        return profile

    async def create_profile(self, data, current_user):
        async def handler():
            if await self.repo.get_by_user(current_user.id):
                raise HTTPException(status_code=409, detail=PROFILE_EXISTS)
            try:
                profile = await self.repo.save(
                    StudentProfile(user_id=current_user.id, **data.model_dump())
                )
            except IntegrityError:
                raise HTTPException(status_code=409, detail=PROFILE_EXISTS)
            return JSONResponse(
                {"success": True, "data": self.mapper.dump(profile, StudentProfileOut)},
                status_code=201,
            )

        return await breaker.call(handler)

    async def list_profiles(self, page: int = 1, per_page: int = 50):
        async def handler():
            profiles = await self.repo.list_all(
                offset=self.paginate.offset(page, per_page), limit=per_page
            )
            return {
                "success": True,
                "data": self.mapper.dump_many(profiles, StudentProfileOut),
            }

        return await breaker.call(handler)

    async def my_profile(self, current_user):
        async def handler():
            profile = await self.repo.get_by_user(current_user.id)
            if not profile:
                raise HTTPException(status_code=404, detail="Student profile not found")
            return {"success": True, "data": self.mapper.dump(profile, StudentProfileOut)}

        return await breaker.call(handler)

    async def get_profile(self, profile_id: int, current_user):
        async def handler():
            profile = await self._get_owned(profile_id, current_user)
            return {"success": True, "data": self.mapper.dump(profile, StudentProfileOut)}

        return await breaker.call(handler)

    async def update_profile(self, profile_id: int, data, current_user):
        async def handler():
            profile = await self._get_owned(profile_id, current_user)
            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            for key, value in update_data.items():
                setattr(profile, key, value)
            profile = await self.repo.save(profile)
            return {"success": True, "data": self.mapper.dump(profile, StudentProfileOut)}

        return await breaker.call(handler)

    async def delete_profile(self, profile_id: int, current_user):
        async def handler():
            await self._get_owned(profile_id, current_user)
            await self.repo.delete_one(profile_id)
            return {"success": True, "message": "Student profile deleted"}

        return await breaker.call(handler)
