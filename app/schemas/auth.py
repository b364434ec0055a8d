from typing import Optional

from pydantic import Field

from app.schemas.my_base_model import CustomBaseModel
from app.schemas.user import UserPublic


class WalletAuthRequest(CustomBaseModel):
    """Request model for wallet login - presence is checked by the Session Issuer"""

    wallet_address: Optional[str] = Field(None, description="Wallet address")
    signature: Optional[str] = Field(None, description="Signature of the message")
    message: Optional[str] = Field(None, description="Signed message")
    wallet_type: Optional[str] = Field(None, description="phantom, metamask or brave")


class AuthResponse(CustomBaseModel):
    """Response model for authentication - output"""

    credential: str
    token_type: str = "bearer"
    user: UserPublic
