"""
Database engine & session factory
=================================

Pool parameters only apply to server databases; SQLite (local dev and the test
suite) gets a plain engine with ``check_same_thread`` disabled so FastAPI's
thread pool can share connections.
"""

import logging
import time
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.config import settings

logger = logging.getLogger("devflowhub.db")

POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 1800  # 30 分鐘

SLOW_QUERY_THRESHOLD_MS = 500


def build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=POOL_RECYCLE,
    )


engine = build_engine(settings.SQLALCHEMY_DATABASE_URI)


@event.listens_for(engine, "before_cursor_execute")
def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    conn.info.setdefault("query_start_time", []).append(time.perf_counter())


@event.listens_for(engine, "after_cursor_execute")
def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    total_ms = (time.perf_counter() - conn.info["query_start_time"].pop()) * 1000
    if total_ms >= SLOW_QUERY_THRESHOLD_MS:
        stmt_preview = statement[:500] + "..." if len(statement) > 500 else statement
        logger.warning(
            "Slow query detected",
            extra={
                "duration_ms": round(total_ms, 2),
                "statement": stmt_preview,
                "threshold_ms": SLOW_QUERY_THRESHOLD_MS,
            },
        )


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
