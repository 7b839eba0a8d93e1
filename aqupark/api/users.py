from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Union
from aqupark.api.deps import get_app_settings, get_current_principal
from aqupark.application.authorization import Principal, authorize_owner_or_admin
from aqupark.application.schemas import (
    EmailCheck,
    LoginResponse,
    MessageResponse,
    UserLogin,
    UserPatch,
    UserRead,
    UserRegister,
)
from aqupark.application.user_service import UserService
from aqupark.core.exceptions import ValidationError
from aqupark.core_settings import Settings
from aqupark.infrastructure.db import get_db
from aqupark.infrastructure.security import create_access_token

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/register", response_model=MessageResponse, status_code=201)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    UserService(db).register(payload)
    return {"message": "Registration successful"}

@router.post("/login", response_model=LoginResponse)
def login(payload: UserLogin, db: Session = Depends(get_db), settings: Settings = Depends(get_app_settings)):
    user = UserService(db).authenticate(payload.email, payload.password)
    token = create_access_token(
        user.id,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALG,
        expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    return {
        "message": "Login successful",
        "user_id": user.id,
        "admin": user.admin,
        "user_name": user.user_name,
        "email": user.email,
        "tel": user.tel,
        "access_token": token,
    }

@router.get("/check-email", response_model=EmailCheck)
def check_email(email: str = Query(""), db: Session = Depends(get_db)):
    if "@" not in email:
        raise ValidationError("Please provide a valid email")
    return {"exists": UserService(db).email_exists(email)}

@router.get("", response_model=Union[UserRead, list[UserRead]])
def get_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """The caller's own profile, or every user for an admin."""
    service = UserService(db)
    if not principal.is_admin:
        return UserRead.model_validate(service.get(principal.user_id))
    return [UserRead.model_validate(u) for u in service.list(skip, limit)]

@router.patch("/profile", response_model=UserRead)
def update_profile(
    payload: UserPatch,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    user_id = authorize_owner_or_admin(principal, payload.target_user_id)
    return UserService(db).update_profile(user_id, payload)
