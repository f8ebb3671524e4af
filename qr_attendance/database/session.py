from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from qr_attendance import config


def build_engine(url: str, **kwargs):
    """Create the engine with bounded waits on the store."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("connect_args", {"connect_timeout": config.DB_TIMEOUT_SECONDS})
        kwargs.setdefault("pool_timeout", config.DB_TIMEOUT_SECONDS)
        kwargs.setdefault("pool_size", 10)
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


# Create SQLAlchemy engine
engine = build_engine(config.DB_URL_STRING)

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Declare a base class for your ORM models
Base = declarative_base()


def get_db():
    db = SessionLocal()  # Create a new session
    try:
        yield db  # Yield the session to be used
    finally:
        db.close()  # Close the session when done
