from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def make_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        # sessions are opened from FastAPI's threadpool
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url,
                         connect_args={"connect_timeout": 30},
                         pool_pre_ping=True,
                         pool_recycle=3600,
    )


# Create the SQLAlchemy engine
engine = make_engine(settings.DATABASE_URL)

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
