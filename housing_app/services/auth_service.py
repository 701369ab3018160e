import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from core.breaker import breaker
from core.check_permission import CheckRolePermission
from core.mapper import ORMMapper
from core.settings import settings
from core.validators import create_access_token
from models.enums import UserRole
from models.models import User
from repos.user_repo import UserRepo
from schemas.schema import UserPublicSchema

logger = logging.getLogger(__name__)

PENDING_APPROVAL_MESSAGE = (
    "Your account is pending approval. You will be able to log in once an "
    "administrator approves your landlord account."
)


class AuthService:
    def __init__(self, db):
        self.repo: UserRepo = UserRepo(db)
        self.permission: CheckRolePermission = CheckRolePermission()
        self.mapper: ORMMapper = ORMMapper()

    async def register(self, data):
        async def handler():
            if await self.repo.get_by_email(data.email):
                raise HTTPException(status_code=409, detail="Email already exists")

            user = User(
                email=data.email,
                first_name=data.first_name,
                last_name=data.last_name,
                phone_number=data.phone_number,
                role=data.role,
                approved=data.role != UserRole.LANDLORD,
            )
            user.normalize()
            user.set_password(raw_password=data.password)
            try:
                await self.repo.create(user)
            except IntegrityError:
                raise HTTPException(status_code=409, detail="Email already exists")

            logger.info("Registered %s as %s", user.email, user.role.value)
            if user.approved:
                message = "Registration successful"
            else:
                message = "Registration successful. Your account is pending approval."
            return JSONResponse(
                {
                    "success": True,
                    "message": message,
                    "user": self.mapper.dump(user, UserPublicSchema),
                },
                status_code=201,
            )

        return await breaker.call(handler)

    async def login(self, data):
        async def handler():
            user = await self.repo.get_by_email(data.email)
            if not user or not user.check_password(raw_password=data.password):
                raise HTTPException(status_code=401, detail="Invalid credentials")

            if user.role == UserRole.LANDLORD and not user.approved:
                logger.info("Login attempt by unapproved landlord %s", user.id)
                return JSONResponse(
                    {
                        "success": True,
                        "approved": False,
                        "token": None,
                        "message": PENDING_APPROVAL_MESSAGE,
                        "user": self.mapper.dump(user, UserPublicSchema),
                    },
                    status_code=200,
                )

            access_token = create_access_token(user.id, user.role.value)
            response = JSONResponse(
                {
                    "success": True,
                    "approved": True,
                    "message": "Login successful",
                    "token": access_token,
                    "user": self.mapper.dump(user, UserPublicSchema),
                },
                status_code=200,
            )
            response.set_cookie(
                key="access_token",
                value=access_token,
                httponly=True,
                secure=settings.SECURE_COOKIES,
                samesite="lax",
                max_age=settings.ACCESS_EXPIRE_HOURS * 3600,
            )
            return response

        return await breaker.call(handler)

    async def set_landlord_approval(self, landlord_id: int, approved: bool):
        async def handler():
            user = await self.repo.by_id(landlord_id)
            if not user or user.role != UserRole.LANDLORD:
                raise HTTPException(status_code=404, detail="Landlord not found")
            user.approved = approved
            await self.repo.save(user)
            logger.info("Landlord %s approval set to %s", landlord_id, approved)
            return {
                "success": True,
                "message": "Landlord approved" if approved else "Landlord approval revoked",
                "user": self.mapper.dump(user, UserPublicSchema),
            }

        return await breaker.call(handler)

    async def pending_landlords(self):
        async def handler():
            landlords = await self.repo.pending_landlords()
            return {
                "success": True,
                "data": self.mapper.dump_many(landlords, UserPublicSchema),
            }

        return await breaker.call(handler)

    async def approval_status(self, email: str):
        async def handler():
            user = await self.repo.get_by_email(email)
            if not user:
                raise HTTPException(status_code=404, detail="User not found")
            return {
                "success": True,
                "email": user.email,
                "role": user.role.value,
                "approved": user.approved,
            }

        return await breaker.call(handler)

    async def check_auth(self, current_user):
        return {
            "success": True,
            "authenticated": True,
            "user": self.mapper.dump(current_user, UserPublicSchema),
        }

    async def get_student(self, student_id: int):
        async def handler():
            user = await self.repo.by_id(student_id)
            if not user or user.role != UserRole.STUDENT:
                raise HTTPException(status_code=404, detail="Student not found")
            return {"success": True, "data": self.mapper.dump(user, UserPublicSchema)}

        return await breaker.call(handler)

    async def user_type_stats(self):
        async def handler():
            counts = await self.repo.count_by_role()
            return {"success": True, "data": counts, "total": sum(counts.values())}

        return await breaker.call(handler)
