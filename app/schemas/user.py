from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.my_base_model import CustomBaseModel


class UserPublic(CustomBaseModel):
    """Public view of a user, never carries the password"""

    id: int
    username: str
    wallet_address: Optional[str] = None
    wallet_type: Optional[str] = None


class CurrentUser(UserPublic):
    """Identity resolved by the Request Authorizer and attached to the request"""


class ProfileResponse(UserPublic):
    """Response model for user profile"""

    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None


class ProfileUpdateRequest(CustomBaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    avatar_url: Optional[str] = Field(None, max_length=2048)


class WalletBindingResponse(CustomBaseModel):
    wallet_address: str
    wallet_type: Optional[str] = None
    scheme: str
