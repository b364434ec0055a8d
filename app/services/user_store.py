"""
User store capability used by the authentication flow.

The Session Issuer and the Request Authorizer only talk to a `UserStore`
passed in from outside, so the backend can be swapped without touching the
signature or credential logic. Two backends ship:

- MemoryUserStore: dict maps guarded by a lock (default, development/tests)
- SqlUserStore: SQLAlchemy `users` table with unique constraints

`create` is the atomic insert-if-absent: it refuses a second user for the same
wallet address (or username) with DuplicateUserError instead of inserting a
duplicate, so two racing first logins end up with one record.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Dict, Optional, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.users import User

logger = logging.getLogger(__name__)

DEMO_USERNAME = "demo"
DEMO_WALLET_ADDRESS = "0x1234567890abcdef1234567890abcdef12345678"
DEMO_WALLET_TYPE = "metamask"

_UPDATABLE_FIELDS = ("username", "wallet_type", "avatar_url")


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    wallet_address: Optional[str]
    wallet_type: Optional[str]
    avatar_url: Optional[str]
    created_at: datetime
    password: str = ""


class DuplicateUserError(Exception):
    """Raised by `create`/`update` when a unique field is already taken."""

    def __init__(self, field: str, value: Optional[str]) -> None:
        super().__init__(f"{field} already exists: {value}")
        self.field = field
        self.value = value


class UserStore(Protocol):
    def get_by_id(self, user_id: int) -> Optional[UserRecord]: ...

    def get_by_wallet_address(self, wallet_address: str) -> Optional[UserRecord]: ...

    def get_by_username(self, username: str) -> Optional[UserRecord]: ...

    def create(
        self,
        username: str,
        wallet_address: Optional[str] = None,
        wallet_type: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> UserRecord: ...

    def update(self, user_id: int, **changes: Optional[str]) -> Optional[UserRecord]: ...


def _check_fields(changes: Dict[str, Optional[str]]) -> None:
    unknown = set(changes) - set(_UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    if "username" in changes and not changes["username"]:
        raise ValueError("username cannot be empty")


class MemoryUserStore:
    """In-process store: id map plus unique indexes on wallet address and username."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[int, UserRecord] = {}
        self._by_wallet: Dict[str, int] = {}
        self._by_username: Dict[str, int] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._users)

    def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        return self._users.get(user_id)

    def get_by_wallet_address(self, wallet_address: str) -> Optional[UserRecord]:
        user_id = self._by_wallet.get(wallet_address)
        return None if user_id is None else self._users.get(user_id)

    def get_by_username(self, username: str) -> Optional[UserRecord]:
        user_id = self._by_username.get(username)
        return None if user_id is None else self._users.get(user_id)

    def create(
        self,
        username: str,
        wallet_address: Optional[str] = None,
        wallet_type: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> UserRecord:
        if not username:
            raise ValueError("username is required")

        with self._lock:
            if wallet_address is not None and wallet_address in self._by_wallet:
                raise DuplicateUserError("wallet_address", wallet_address)
            if username in self._by_username:
                raise DuplicateUserError("username", username)

            user = UserRecord(
                id=self._next_id,
                username=username,
                wallet_address=wallet_address,
                wallet_type=wallet_type,
                avatar_url=avatar_url,
                created_at=datetime.now(timezone.utc),
            )
            self._next_id += 1
            self._users[user.id] = user
            self._by_username[username] = user.id
            if wallet_address is not None:
                self._by_wallet[wallet_address] = user.id
            return user

    def update(self, user_id: int, **changes: Optional[str]) -> Optional[UserRecord]:
        _check_fields(changes)
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None

            new_username = changes.get("username", user.username)
            if new_username != user.username:
                if new_username in self._by_username:
                    raise DuplicateUserError("username", new_username)
                del self._by_username[user.username]
                self._by_username[new_username] = user.id

            updated = replace(user, **changes)
            self._users[user_id] = updated
            return updated


class SqlUserStore:
    """SQLAlchemy backed store; uniqueness is enforced by the table constraints."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _to_record(user: User) -> UserRecord:
        return UserRecord(
            id=user.id,
            username=user.username,
            wallet_address=user.wallet_address,
            wallet_type=user.wallet_type,
            avatar_url=user.avatar_url,
            created_at=user.created_at,
            password=user.password or "",
        )

    def _first(self, *criteria) -> Optional[UserRecord]:
        with self._session_factory() as db:
            user = db.query(User).filter(*criteria).first()
            return None if user is None else self._to_record(user)

    def get_by_id(self, user_id: int) -> Optional[UserRecord]:
        return self._first(User.id == user_id)

    def get_by_wallet_address(self, wallet_address: str) -> Optional[UserRecord]:
        return self._first(User.wallet_address == wallet_address)

    def get_by_username(self, username: str) -> Optional[UserRecord]:
        return self._first(User.username == username)

    def _duplicate_from(self, db: Session, username: str, wallet_address: Optional[str]) -> DuplicateUserError:
        # the driver's IntegrityError text differs per backend, so ask the table
        if wallet_address is not None and db.query(User.id).filter(User.wallet_address == wallet_address).first():
            return DuplicateUserError("wallet_address", wallet_address)
        return DuplicateUserError("username", username)

    def create(
        self,
        username: str,
        wallet_address: Optional[str] = None,
        wallet_type: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> UserRecord:
        if not username:
            raise ValueError("username is required")

        with self._session_factory() as db:
            user = User(
                username=username,
                password="",
                wallet_address=wallet_address,
                wallet_type=wallet_type,
                avatar_url=avatar_url,
                created_at=datetime.now(timezone.utc),
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise self._duplicate_from(db, username, wallet_address)
            db.refresh(user)
            return self._to_record(user)

    def update(self, user_id: int, **changes: Optional[str]) -> Optional[UserRecord]:
        _check_fields(changes)
        with self._session_factory() as db:
            user = db.query(User).filter(User.id == user_id).first()
            if user is None:
                return None
            for field, value in changes.items():
                setattr(user, field, value)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise DuplicateUserError("username", changes.get("username"))
            db.refresh(user)
            return self._to_record(user)


def seed_demo_user(store: UserStore) -> UserRecord:
    """Create the development `demo` account unless it already exists."""
    existing = store.get_by_wallet_address(DEMO_WALLET_ADDRESS)
    if existing is not None:
        return existing
    try:
        user = store.create(
            username=DEMO_USERNAME,
            wallet_address=DEMO_WALLET_ADDRESS,
            wallet_type=DEMO_WALLET_TYPE,
        )
    except DuplicateUserError:
        return store.get_by_wallet_address(DEMO_WALLET_ADDRESS) or store.get_by_username(DEMO_USERNAME)
    logger.info("seeded demo user id=%s", user.id)
    return user


def build_user_store(settings) -> UserStore:
    """Create the configured store; non-production stores get the demo user."""
    backend = settings.USER_STORE.strip().lower()
    if backend == "memory":
        store: UserStore = MemoryUserStore()
    elif backend == "sql":
        from app.db.base import Base
        from app.db.session import SessionLocal, engine

        Base.metadata.create_all(bind=engine)
        store = SqlUserStore(SessionLocal)
    else:
        raise ValueError(f"Unknown USER_STORE: {settings.USER_STORE}")

    logger.info("user store backend: %s", backend)
    if not settings.is_production:
        seed_demo_user(store)
    return store
