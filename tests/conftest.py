from typing import Callable, Generator

import base58
import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.core.config import Settings, get_settings
from app.core.dependencies import get_user_store
from app.db.base import Base
from app.services.user_store import MemoryUserStore, SqlUserStore


class SolanaWallet:
    """Phantom-style key pair: base-58 public key as address, base-58 signatures"""

    def __init__(self) -> None:
        self._key = Ed25519PrivateKey.generate()
        raw = self._key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        self.address = base58.b58encode(raw).decode()

    def sign(self, message: str) -> str:
        return base58.b58encode(self._key.sign(message.encode("utf-8"))).decode()


class EthereumWallet:
    """MetaMask/Brave-style account signing with EIP-191 personal sign"""

    def __init__(self) -> None:
        self._account = Account.create()
        self.address = self._account.address

    def sign(self, message: str) -> str:
        signed = self._account.sign_message(encode_defunct(text=message))
        return "0x" + bytes(signed.signature).hex()


@pytest.fixture
def dev_settings() -> Settings:
    return Settings(ENVIRONMENT="development", SKIP_AUTH=False, ENCODE_KEY="test-secret-key-0123456789abcdefghijkl")


@pytest.fixture
def prod_settings() -> Settings:
    return Settings(ENVIRONMENT="production", SKIP_AUTH=False, ENCODE_KEY="production-test-secret-0123456789abcdef")


@pytest.fixture
def store() -> MemoryUserStore:
    return MemoryUserStore()


@pytest.fixture
def sql_store() -> Generator[SqlUserStore, None, None]:
    """SqlUserStore on an in-memory SQLite database"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield SqlUserStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    engine.dispose()


@pytest.fixture
def solana_wallet() -> SolanaWallet:
    return SolanaWallet()


@pytest.fixture
def ethereum_wallet() -> EthereumWallet:
    return EthereumWallet()


@pytest.fixture
def make_client(store) -> Generator[Callable[[Settings], TestClient], None, None]:
    """Build a test client bound to the given settings and the `store` fixture"""
    clients = []

    def factory(settings: Settings) -> TestClient:
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_user_store] = lambda: store
        test_client = TestClient(app)
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    yield factory
    for test_client in clients:
        test_client.__exit__(None, None, None)
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, dev_settings) -> TestClient:
    """Create a test client for the FastAPI application (development settings)"""
    return make_client(dev_settings)


@pytest.fixture
def prod_client(make_client, prod_settings) -> TestClient:
    return make_client(prod_settings)
