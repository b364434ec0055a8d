import base64
import json
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.core.errors import Forbidden
from app.core.jwt_utils import create_access_token, verify_token

WALLET = "0x1234567890abcdef1234567890abcdef12345678"


def _b64url(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


class TestCreateAccessToken:
    def test_claims(self, dev_settings):
        token = create_access_token(7, WALLET, settings=dev_settings)
        payload = jwt.decode(token, dev_settings.ENCODE_KEY, algorithms=["HS256"])

        assert payload["sub"] == "7"
        assert payload["wallet_address"] == WALLET
        assert payload["exp"] - payload["iat"] == 24 * 60 * 60

    def test_wallet_address_may_be_null(self, dev_settings):
        token = create_access_token(3, None, settings=dev_settings)
        payload = verify_token(token, settings=dev_settings)
        assert payload["user_id"] == 3
        assert payload["wallet_address"] is None


class TestVerifyToken:
    def test_round_trip(self, dev_settings):
        token = create_access_token(42, WALLET, settings=dev_settings)
        payload = verify_token(token, settings=dev_settings)
        assert payload["user_id"] == 42
        assert payload["wallet_address"] == WALLET

    def test_accepted_just_before_expiry(self, dev_settings):
        """Issued 23h59m ago: still inside the 24 hour window"""
        issued_at = datetime.now(timezone.utc) - timedelta(hours=23, minutes=59)
        token = create_access_token(1, WALLET, settings=dev_settings, issued_at=issued_at)
        assert verify_token(token, settings=dev_settings)["user_id"] == 1

    def test_rejected_just_after_expiry(self, dev_settings):
        """Issued 24h01m ago: outside the 24 hour window"""
        issued_at = datetime.now(timezone.utc) - timedelta(hours=24, minutes=1)
        token = create_access_token(1, WALLET, settings=dev_settings, issued_at=issued_at)
        with pytest.raises(Forbidden) as exc_info:
            verify_token(token, settings=dev_settings)
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Token expired"

    def test_tampered_payload_rejected(self, dev_settings):
        token = create_access_token(1, WALLET, settings=dev_settings)
        header, _, signature = token.split(".")
        forged = _b64url({"sub": "2", "wallet_address": WALLET, "iat": 0, "exp": 9999999999})
        with pytest.raises(Forbidden):
            verify_token(f"{header}.{forged}.{signature}", settings=dev_settings)

    def test_wrong_key_rejected(self, dev_settings, prod_settings):
        token = create_access_token(1, WALLET, settings=prod_settings)
        with pytest.raises(Forbidden):
            verify_token(token, settings=dev_settings)

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
    def test_garbage_rejected(self, dev_settings, token):
        with pytest.raises(Forbidden):
            verify_token(token, settings=dev_settings)

    def test_missing_sub_rejected(self, dev_settings):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode({"iat": now, "exp": now + 60}, dev_settings.ENCODE_KEY, algorithm="HS256")
        with pytest.raises(Forbidden):
            verify_token(token, settings=dev_settings)

    def test_non_numeric_sub_rejected(self, dev_settings):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode({"sub": "abc", "iat": now, "exp": now + 60}, dev_settings.ENCODE_KEY, algorithm="HS256")
        with pytest.raises(Forbidden) as exc_info:
            verify_token(token, settings=dev_settings)
        assert exc_info.value.detail == "Invalid token payload"

    def test_none_algorithm_rejected(self, dev_settings):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode({"sub": "1", "iat": now, "exp": now + 60}, None, algorithm="none")
        with pytest.raises(Forbidden):
            verify_token(token, settings=dev_settings)
