"""
Error taxonomy for the authentication slice.

Every error carries a stable machine-readable `kind` and maps 1:1 to an HTTP
status. main.py renders them as {"error": kind, "message": detail}.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status


class AuthError(HTTPException):
    kind: str = "InternalError"
    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_default: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> None:
        super().__init__(
            status_code=self.status_code_default,
            detail=message or self.message_default,
            headers=headers,
        )

    def to_body(self) -> Dict[str, str]:
        return {"error": self.kind, "message": str(self.detail)}


class MissingFields(AuthError):
    kind = "MissingFields"
    status_code_default = status.HTTP_400_BAD_REQUEST
    message_default = "Wallet address, signature, and message are required"


class UnsupportedWallet(AuthError):
    kind = "UnsupportedWallet"
    status_code_default = status.HTTP_400_BAD_REQUEST
    message_default = "Unsupported wallet type"


class InvalidRequest(AuthError):
    kind = "InvalidRequest"
    status_code_default = status.HTTP_400_BAD_REQUEST
    message_default = "Invalid request body"


class InvalidSignature(AuthError):
    kind = "InvalidSignature"
    status_code_default = status.HTTP_401_UNAUTHORIZED
    message_default = "Invalid signature"


class Unauthenticated(AuthError):
    kind = "Unauthenticated"
    status_code_default = status.HTTP_401_UNAUTHORIZED
    message_default = "No authentication token provided"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(AuthError):
    kind = "Forbidden"
    status_code_default = status.HTTP_403_FORBIDDEN
    message_default = "Failed to authenticate token"


class NotFound(AuthError):
    kind = "NotFound"
    status_code_default = status.HTTP_404_NOT_FOUND
    message_default = "Not found"


class UsernameTaken(AuthError):
    kind = "UsernameTaken"
    status_code_default = status.HTTP_409_CONFLICT
    message_default = "Username is already taken"


class InternalError(AuthError):
    pass
