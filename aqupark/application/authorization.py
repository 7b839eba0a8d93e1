from dataclasses import dataclass
from typing import Optional
from aqupark.core.exceptions import AuthorizationError

@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""
    user_id: int
    is_admin: bool = False

def authorize_owner_or_admin(principal: Principal, target_user_id: Optional[int] = None) -> int:
    """
    Resolve the user a request acts on.

    No target means the caller. Any other target requires admin rights.
    """
    if target_user_id is None or target_user_id == principal.user_id:
        return principal.user_id
    if not principal.is_admin:
        raise AuthorizationError(
            "Not allowed to act on another user's data",
            {"userId": principal.user_id, "targetUserId": target_user_id},
        )
    return target_user_id

def require_admin(principal: Principal) -> Principal:
    if not principal.is_admin:
        raise AuthorizationError("Administrator privileges required")
    return principal
