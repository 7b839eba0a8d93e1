from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from aqupark.application.authorization import Principal, require_admin
from aqupark.core.exceptions import AuthenticationError
from aqupark.core.logging_config import set_request_context
from aqupark.core_settings import Settings
from aqupark.domain.models import User
from aqupark.infrastructure.db import get_db
from aqupark.infrastructure.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Principal:
    """Resolve the bearer token to a user; the admin flag always comes from the database."""
    if credentials is None:
        raise AuthenticationError("Please log in first")
    payload = decode_access_token(credentials.credentials, settings.JWT_SECRET, settings.JWT_ALG)
    if not payload:
        raise AuthenticationError("Invalid or expired token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid or expired token")

    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User no longer exists")
    set_request_context(user_id=str(user.id))
    return Principal(user_id=user.id, is_admin=bool(user.admin))

def get_admin_principal(principal: Principal = Depends(get_current_principal)) -> Principal:
    return require_admin(principal)
