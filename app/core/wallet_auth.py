"""
Wallet Signature Verification

This module decides whether a wallet address really signed a login message.
Two signature schemes are supported and the wallet type sent by the frontend
is resolved to one of them exactly once, at the request boundary.

Schemes:
- ED25519 (Phantom / Solana): address and signature are base-58 text, the
  address bytes are the raw 32 byte public key.
- ECDSA_RECOVER (MetaMask, Brave / Ethereum): EIP-191 "personal sign". The
  signer address is recovered from the signature and compared to the claimed
  address, case-insensitively.

verify_signature() never raises: every decode or verify failure is a False.
"""

import logging
from enum import Enum
from typing import Optional

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_address, to_checksum_address

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Development seam: accepted as a signature only outside production.
SIMULATED_SIGNATURE = "simulated"

ED25519_PUBLIC_KEY_BYTES = 32
ED25519_SIGNATURE_BYTES = 64


class WalletScheme(str, Enum):
    ED25519 = "ed25519"
    ECDSA_RECOVER = "ecdsa-recover"


class WalletType(str, Enum):
    PHANTOM = "phantom"
    METAMASK = "metamask"
    BRAVE = "brave"

    @property
    def scheme(self) -> WalletScheme:
        if self is WalletType.PHANTOM:
            return WalletScheme.ED25519
        return WalletScheme.ECDSA_RECOVER


def resolve_wallet_type(value: Optional[str]) -> Optional[WalletType]:
    """
    Parse the wallet type sent by the client.

    Returns None when the client sent nothing; raises ValueError for a value
    outside the supported set.
    """
    if value is None or not value.strip():
        return None
    return WalletType(value.strip().lower())


def scheme_for(wallet_type: Optional[WalletType]) -> WalletScheme:
    """Wallets that do not announce a type are treated as Ethereum wallets."""
    if wallet_type is None:
        return WalletScheme.ECDSA_RECOVER
    return wallet_type.scheme


def normalize_address(wallet_address: str, scheme: WalletScheme) -> str:
    """
    Canonical form used as the account key.

    Ethereum addresses are case-insensitive, so they are stored checksummed.
    Base-58 addresses are case-sensitive and kept as sent. A value that is not
    a valid Ethereum address is returned unchanged and fails verification.
    """
    wallet_address = wallet_address.strip()
    if scheme is WalletScheme.ECDSA_RECOVER and is_address(wallet_address):
        return to_checksum_address(wallet_address)
    return wallet_address


def _verify_ed25519(wallet_address: str, message: str, signature: str) -> bool:
    public_key_bytes = base58.b58decode(wallet_address)
    signature_bytes = base58.b58decode(signature)
    if len(public_key_bytes) != ED25519_PUBLIC_KEY_BYTES or len(signature_bytes) != ED25519_SIGNATURE_BYTES:
        return False

    try:
        Ed25519PublicKey.from_public_bytes(public_key_bytes).verify(signature_bytes, message.encode("utf-8"))
    except InvalidSignature:
        return False
    return True


def _verify_ecdsa_recover(wallet_address: str, message: str, signature: str) -> bool:
    encoded_msg = encode_defunct(text=message)
    recovered_address = Account.recover_message(encoded_msg, signature=signature)
    return recovered_address.lower() == wallet_address.strip().lower()


_VERIFIERS = {
    WalletScheme.ED25519: _verify_ed25519,
    WalletScheme.ECDSA_RECOVER: _verify_ecdsa_recover,
}


def verify_signature(
    wallet_address: str,
    message: str,
    signature: str,
    scheme: WalletScheme,
    *,
    settings: Settings,
) -> bool:
    """
    Check that `signature` proves control of `wallet_address` over `message`.

    Args:
        wallet_address: Address in the scheme's native format
        message: The exact plaintext the wallet signed
        signature: Signature in the scheme's native encoding (base-58 or hex)
        scheme: Resolved signature scheme
        settings: Runtime settings, consulted for the development bypass

    Returns:
        True if the signature is valid, False on any failure
    """
    if not wallet_address or not message or not signature:
        return False

    if signature == SIMULATED_SIGNATURE:
        if settings.is_production:
            logger.warning("simulated signature rejected in production for %s", wallet_address)
            return False
        logger.warning("simulated signature accepted for %s (environment=%s)", wallet_address, settings.ENVIRONMENT)
        return True

    verifier = _VERIFIERS.get(scheme)
    if verifier is None:
        return False

    try:
        return verifier(wallet_address, message, signature)
    except Exception as e:
        logger.info("%s signature verification failed for %s: %s", scheme.value, wallet_address, e)
        return False
