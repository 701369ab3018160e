from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, Request
from jose import ExpiredSignatureError, JWTError, jwt

from .settings import settings


def create_access_token(user_id: int, role: str) -> str:
    expires = datetime.now(timezone.utc) + timedelta(
        hours=settings.ACCESS_EXPIRE_HOURS
    )
    return jwt.encode(
        {"sub": str(user_id), "role": role, "type": "access", "exp": expires},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def decode_http_access_token(token: str) -> int:
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
    )

    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token missing user ID")

    try:
        return int(user_id)
    except ValueError:
        raise JWTError("Invalid user ID in token")


def extract_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get("access_token")


async def jwt_protect(request: Request) -> int:
    token = extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        return decode_http_access_token(token)
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
