from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader
from jose import JWTError

from core.logger import get_logger
from core.security import AUTH_HEADER, decode_access_token
from models import Role
from routes.complaint.store import ComplaintStore

logger = get_logger("auth")

token_header = APIKeyHeader(name=AUTH_HEADER, auto_error=False)


@dataclass(frozen=True)
class Identity:
    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def request_settings(request: Request):
    return request.app.state.settings


def get_store(request: Request) -> ComplaintStore:
    return ComplaintStore(request.app.state.db.alias)


def get_current_user(
    token: Optional[str] = Depends(token_header),
    settings=Depends(request_settings),
) -> Identity:
    if not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "No token, authorization denied")

    try:
        payload = decode_access_token(token, settings)
        user_id = payload.get("user_id")
        role = Role(payload.get("role"))
    except (JWTError, ValueError):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token is not valid")

    if not user_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Token is not valid")

    return Identity(id=str(user_id), role=role)


def admin_required(user: Identity = Depends(get_current_user)) -> Identity:
    if user.role is not Role.ADMIN:
        logger.warning("Admin route refused for user %s (role=%s)", user.id, user.role.value)
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Access denied. Admin privileges required.")
    return user


def citizen_required(user: Identity = Depends(get_current_user)) -> Identity:
    if user.role is not Role.CITIZEN:
        logger.warning("Citizen route refused for user %s (role=%s)", user.id, user.role.value)
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Access denied. Citizen privileges required.")
    return user
