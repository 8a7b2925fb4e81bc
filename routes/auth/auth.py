from fastapi import APIRouter, Depends, HTTPException, Request, status
from mongoengine.errors import NotUniqueError

from core.dependencies import Identity, get_current_user, request_settings
from core.logger import get_logger
from core.security import create_access_token, hash_password, verify_password
from models import Role, User
from .schemas import LoginRequest, RegisterRequest, TokenResponse, UserPublic

router = APIRouter(prefix="/auth", tags=["Auth"])

logger = get_logger("auth")


def _users(request: Request):
    return User.objects.using(request.app.state.db.alias)


def _public(user: User) -> UserPublic:
    return UserPublic(id=str(user.id), name=user.name, email=user.email, role=user.role)


def _token_response(user: User, settings) -> TokenResponse:
    token = create_access_token({"user_id": str(user.id), "role": user.role}, settings)
    return TokenResponse(access_token=token, user=_public(user))


@router.post("/register", response_model=TokenResponse)
def register(data: RegisterRequest, request: Request, settings=Depends(request_settings)):
    email = data.email.lower()
    if _users(request)(email=email).first():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "User already exists")

    user = User(
        name=data.name,
        email=email,
        phone=data.phone,
        password_hash=hash_password(data.password),
        role=Role.CITIZEN.value,
    )
    user.switch_db(request.app.state.db.alias)
    try:
        user.save()
    except NotUniqueError:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "User already exists")

    logger.info("Citizen %s registered", user.id)
    return _token_response(user, settings)


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, request: Request, settings=Depends(request_settings)):
    user = _users(request)(email=data.email.lower()).first()

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid credentials")

    return _token_response(user, settings)


@router.get("/me", response_model=UserPublic)
def me(request: Request, identity: Identity = Depends(get_current_user)):
    user = _users(request)(id=identity.id).first()
    if not user:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "User not found")
    return _public(user)
