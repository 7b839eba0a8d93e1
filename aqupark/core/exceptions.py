# aqupark/core/exceptions.py

from enum import Enum
from typing import Any, Dict, Optional
from fastapi import status

class ErrorCode(Enum):
    """Error codes returned in every error body."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    EMPTY_CART = "EMPTY_CART"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    CHECKOUT_TIMEOUT = "CHECKOUT_TIMEOUT"

class ShopError(Exception):
    """Base class for errors that reach the client as a JSON body."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_response(self) -> Dict[str, Any]:
        body = {"code": self.code.value, "message": self.message}
        if self.context:
            body["context"] = self.context
        return {"error": body}

class ValidationError(ShopError):
    code = ErrorCode.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST

class EmptyCartError(ShopError):
    code = ErrorCode.EMPTY_CART
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, user_id: int):
        super().__init__("Cart is empty, nothing to check out", {"userId": user_id})

class AuthenticationError(ShopError):
    code = ErrorCode.AUTHENTICATION_REQUIRED
    status_code = status.HTTP_401_UNAUTHORIZED

class AuthorizationError(ShopError):
    code = ErrorCode.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN

class NotFoundError(ShopError):
    code = ErrorCode.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

class ConflictError(ShopError):
    """Duplicate unique value supplied by the client (e.g. an e-mail)."""
    code = ErrorCode.CONFLICT
    status_code = status.HTTP_400_BAD_REQUEST

class PersistenceError(ShopError):
    """
    Database or transaction failure. The transaction has already been rolled
    back when this is raised; the message never carries driver text.
    """
    code = ErrorCode.PERSISTENCE_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

class CheckoutTimeoutError(PersistenceError):
    code = ErrorCode.CHECKOUT_TIMEOUT
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
