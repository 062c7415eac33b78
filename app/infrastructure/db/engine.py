from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


@lru_cache(maxsize=4)
def get_engine(dsn: str, pool_min: int = 2, pool_max: int = 10) -> Engine:
    return create_engine(
        dsn,
        future=True,
        pool_pre_ping=True,
        pool_size=pool_min,
        max_overflow=max(pool_max - pool_min, 0),
    )


def ping(engine: Engine) -> bool:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1 AS heartbeat"))
    return True


def create_schema(engine: Engine) -> None:
    from app.infrastructure.db.models import identity  # noqa: F401

    Base.metadata.create_all(engine)
