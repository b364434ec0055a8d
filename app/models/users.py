from sqlalchemy import Column, DateTime, Integer, Text
from sqlalchemy.sql import func

from app.db.base import Base


class User(Base):
    """Model for users table
    Example:
    {
        "id": 1,
        "username": "user_4821",
        "password": "",
        "wallet_address": "0x1234567890abcdef1234567890abcdef12345678",
        "wallet_type": "metamask",
        "avatar_url": null,
        "created_at": "2024-01-01T12:00:00"
    }
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, unique=True)
    # wallet accounts have no password
    password = Column(Text, nullable=False, default="")
    wallet_address = Column(Text, nullable=True, unique=True)
    wallet_type = Column(Text, nullable=True)
    avatar_url = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
