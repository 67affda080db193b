"""
Single place to:
- Read DATABASE_URL from env (MySQL via PyMySQL in prod, SQLite is fine locally)
- Create a SQLAlchemy Engine
- Create a Session factory (SessionLocal) for per-request DB sessions
- Provide get_db() dependency for FastAPI routes

Only finished games (match records) live in the database; games in
progress are kept in memory by the GameStore.
"""

import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from dotenv import load_dotenv

# 1) Load env vars from .env if present
# dev convenience; in prod my platform injects env vars
load_dotenv()

# 2) Pull the connection string.
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError(
        "DATABASE_URL is not set. Add it to your environment or a local .env (not committed)."
    )

# 3) Create the SQLAlchemy Engine.
#    pool_pre_ping=True = auto-detect dead connections (helps with long-lived processes).
#    SQLite needs check_same_thread=False because FastAPI runs sync routes in a threadpool.
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    echo=False,
    future=True,
    connect_args=connect_args,
)

# 4) Session factory. Each request gets its own session.
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

# 5) Base class for ORM models.
class Base(DeclarativeBase):
    pass

# 6) FastAPI dependency that yields a DB session for the duration of a request.
def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
