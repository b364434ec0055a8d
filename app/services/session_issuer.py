import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from app.core.config import Settings
from app.core.errors import InternalError, InvalidSignature, MissingFields, UnsupportedWallet
from app.core.jwt_utils import create_access_token
from app.core.wallet_auth import WalletType, normalize_address, resolve_wallet_type, scheme_for, verify_signature
from app.services.user_store import DuplicateUserError, UserRecord, UserStore

logger = logging.getLogger(__name__)

USERNAME_PREFIX = "user_"
USERNAME_ATTEMPTS = 10


@dataclass(frozen=True)
class AuthResult:
    credential: str
    user: UserRecord


def generate_username() -> str:
    return f"{USERNAME_PREFIX}{secrets.randbelow(1_000_000):06d}"


def _create_wallet_user(store: UserStore, wallet_address: str, wallet_type: Optional[WalletType]) -> UserRecord:
    """
    Insert a user for a first-seen wallet.

    Username collisions are retried with a fresh name. If another request
    created the wallet's user first, that record is returned instead.
    """
    tag = wallet_type.value if wallet_type else None
    for _ in range(USERNAME_ATTEMPTS):
        username = generate_username()
        if store.get_by_username(username) is not None:
            continue
        try:
            user = store.create(username=username, wallet_address=wallet_address, wallet_type=tag)
        except DuplicateUserError as e:
            if e.field == "wallet_address":
                winner = store.get_by_wallet_address(wallet_address)
                if winner is not None:
                    logger.info("wallet %s registered concurrently, using user id=%s", wallet_address, winner.id)
                    return winner
            continue
        logger.info("created user id=%s for wallet %s", user.id, wallet_address)
        return user

    raise InternalError("Could not allocate a username")


def authenticate_wallet(
    store: UserStore,
    wallet_address: Optional[str],
    signature: Optional[str],
    message: Optional[str],
    wallet_type: Optional[str],
    *,
    settings: Settings,
) -> AuthResult:
    """
    Turn a signed wallet challenge into a user record and a bearer credential.

    Raises:
        MissingFields: address, signature or message absent
        UnsupportedWallet: wallet type outside the supported set
        InvalidSignature: the signature does not verify
        InternalError: the store failed
    """
    wallet_address = (wallet_address or "").strip()
    if not wallet_address or not signature or not message:
        raise MissingFields()

    try:
        resolved_type = resolve_wallet_type(wallet_type)
    except ValueError:
        raise UnsupportedWallet(f"Unsupported wallet type: {wallet_type}")

    scheme = scheme_for(resolved_type)
    wallet_address = normalize_address(wallet_address, scheme)
    if not verify_signature(wallet_address, message, signature, scheme, settings=settings):
        raise InvalidSignature()

    tag = resolved_type.value if resolved_type else None
    try:
        user = store.get_by_wallet_address(wallet_address)
        if user is None:
            user = _create_wallet_user(store, wallet_address, resolved_type)
        elif user.wallet_type != tag:
            logger.info("user id=%s wallet type %s -> %s", user.id, user.wallet_type, tag)
            user = store.update(user.id, wallet_type=tag) or user
    except InternalError:
        raise
    except Exception:
        logger.exception("user store failure during wallet authentication")
        raise InternalError("Internal server error during authentication")

    credential = create_access_token(user.id, user.wallet_address, settings=settings)
    return AuthResult(credential=credential, user=user)
