from fastapi import HTTPException

from models.enums import UserRole


class CheckRolePermission:
    async def check_admin(self, current_user):
        if current_user.role != UserRole.ADMIN:
            raise HTTPException(status_code=403, detail="Admin access required")

    async def check_landlord(self, current_user):
        if current_user.role == UserRole.ADMIN:
            return
        if current_user.role != UserRole.LANDLORD:
            raise HTTPException(status_code=403, detail="Landlord access required")
        if not current_user.approved:
            raise HTTPException(
                status_code=403, detail="Your landlord account is pending approval"
            )

    async def check_student(self, current_user):
        if current_user.role not in {UserRole.STUDENT, UserRole.ADMIN}:
            raise HTTPException(status_code=403, detail="Student access required")

    async def check_owner_or_admin(self, current_user, owner_id: int, detail=None):
        if current_user.role == UserRole.ADMIN:
            return
        if current_user.id != owner_id:
            raise HTTPException(
                status_code=403,
                detail=detail or "You are not allowed to perform this action",
            )

    def is_admin(self, current_user) -> bool:
        return current_user.role == UserRole.ADMIN
