from fastapi import APIRouter, Depends, status

import app.schemas.auth as schemas
from app.core.config import Settings, get_settings
from app.core.dependencies import get_user_store
from app.schemas.my_base_model import ErrorResponse
from app.schemas.user import UserPublic
from app.services.session_issuer import authenticate_wallet
from app.services.user_store import UserStore

router = APIRouter()
group_tags = ["Auth"]


@router.post(
    "/wallet",
    tags=group_tags,
    response_model=schemas.AuthResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def wallet_login(
    body: schemas.WalletAuthRequest,
    settings: Settings = Depends(get_settings),
    store: UserStore = Depends(get_user_store),
) -> schemas.AuthResponse:
    """Verify a wallet signature and return a 24 hour bearer credential.

    Body:
    - walletAddress: base-58 public key (phantom) or 0x address (metamask, brave)
    - signature: base-58 (phantom) or hex (metamask, brave) signature of `message`
    - message: the exact text the wallet signed
    - walletType: phantom | metamask | brave, optional
    """
    result = authenticate_wallet(
        store,
        body.wallet_address,
        body.signature,
        body.message,
        body.wallet_type,
        settings=settings,
    )
    return schemas.AuthResponse(
        credential=result.credential,
        user=UserPublic.from_record(result.user),
    )
