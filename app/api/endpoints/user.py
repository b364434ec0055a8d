import logging
from enum import Enum
from typing import List

from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_current_user, get_user_store, require_wallet
from app.core.errors import NotFound, UsernameTaken
from app.core.wallet_auth import resolve_wallet_type, scheme_for
from app.schemas.my_base_model import ErrorResponse
from app.schemas.user import (
    CurrentUser,
    ProfileResponse,
    ProfileUpdateRequest,
    WalletBindingResponse,
)
from app.services.user_store import DuplicateUserError, UserStore

logger = logging.getLogger(__name__)

router = APIRouter()
group_tags: List[str | Enum] = ["user"]

_auth_errors = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


@router.get(
    "/me",
    tags=group_tags,
    response_model=CurrentUser,
    status_code=status.HTTP_200_OK,
    responses=_auth_errors,
)
def get_me(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Return the identity the bearer credential resolved to."""
    return user


@router.get(
    "/profile",
    tags=group_tags,
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    responses={**_auth_errors, 404: {"model": ErrorResponse}},
)
def get_profile(
    user: CurrentUser = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
) -> ProfileResponse:
    """
    Get the profile of the authenticated user.

    The password column is never part of the response.
    """
    record = store.get_by_id(user.id)
    if record is None:
        raise NotFound("User not found")
    return ProfileResponse.from_record(record)


@router.patch(
    "/profile",
    tags=group_tags,
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    responses={**_auth_errors, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_profile(
    body: ProfileUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
) -> ProfileResponse:
    """
    Update username and/or avatar url.

    Body:
    - username: 3-64 chars of letters, digits, `_`, `.`, `-`; must be unused
    - avatarUrl: url of the avatar image, null clears it
    """
    changes = body.model_dump(exclude_unset=True)
    if changes.get("username") is None:
        changes.pop("username", None)

    if not changes:
        record = store.get_by_id(user.id)
    else:
        try:
            record = store.update(user.id, **changes)
        except DuplicateUserError:
            raise UsernameTaken()
    if record is None:
        raise NotFound("User not found")

    logger.info("user id=%s updated profile fields: %s", user.id, ", ".join(sorted(changes)) or "-")
    return ProfileResponse.from_record(record)


@router.get(
    "/wallet",
    tags=group_tags,
    response_model=WalletBindingResponse,
    status_code=status.HTTP_200_OK,
    responses=_auth_errors,
)
def get_wallet(user: CurrentUser = Depends(require_wallet)) -> WalletBindingResponse:
    """Wallet bound to the authenticated user; 403 when the account has none."""
    try:
        wallet_type = resolve_wallet_type(user.wallet_type)
    except ValueError:
        wallet_type = None
    return WalletBindingResponse(
        wallet_address=user.wallet_address,
        wallet_type=user.wallet_type,
        scheme=scheme_for(wallet_type).value,
    )
