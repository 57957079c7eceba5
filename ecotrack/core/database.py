"""
Database configuration and connection management.

This module provides:
- Engine construction (callers own the engine they build)
- Connection pooling with sane defaults (StaticPool for SQLite)
- Table definitions for every record kind the record store persists
"""
from typing import Optional
import logging
import os

from sqlalchemy import (
    create_engine,
    MetaData,
    Table,
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    Float,
    JSON,
    Text,
    Index,
    UniqueConstraint,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool, StaticPool

from ecotrack.core.config import settings

logger = logging.getLogger(__name__)

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour


profiles = Table(
    "profiles",
    metadata,
    Column("id", String(128), primary_key=True),
    Column("username", String(64), nullable=False),
    Column("email", String(255), nullable=True),
    Column("city", String(128), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

carbon_records = Table(
    "carbon_records",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user_id", String(128), nullable=False),
    Column("emission", Float, nullable=False),
    Column("calculation_inputs", JSON, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_carbon_records_user_created", "user_id", "created_at"),
)

insights = Table(
    "insights",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user_id", String(128), nullable=False),
    Column("kind", String(16), nullable=False),
    Column("title", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("priority", String(16), nullable=False),
    Column("category", String(32), nullable=False),
    Column("carbon_impact", Float, nullable=True),
    Column("read", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_insights_user_kind", "user_id", "kind"),
)

user_challenges = Table(
    "user_challenges",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user_id", String(128), nullable=False),
    Column("challenge_id", String(64), nullable=False),
    Column("period_key", String(32), nullable=False),
    Column("progress", Float, nullable=False, default=0),
    Column("completed", Boolean, nullable=False, default=False),
    Column("started_at", DateTime(timezone=True), nullable=False),
    Column("completed_at", DateTime(timezone=True), nullable=True),
    UniqueConstraint("user_id", "challenge_id", "period_key", name="uq_user_challenge_period"),
)

challenge_stats = Table(
    "challenge_stats",
    metadata,
    Column("id", String(128), primary_key=True),
    Column("user_id", String(128), nullable=False),
    Column("total_points", Integer, nullable=False, default=0),
    Column("daily_streak", Integer, nullable=False, default=0),
    Column("completed_count", Integer, nullable=False, default=0),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

community_posts = Table(
    "community_posts",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user_id", String(128), nullable=False),
    Column("title", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("likes_count", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

post_comments = Table(
    "post_comments",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("post_id", String(64), nullable=False),
    Column("user_id", String(128), nullable=False),
    Column("content", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_post_comments_post", "post_id"),
)

post_likes = Table(
    "post_likes",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("post_id", String(64), nullable=False),
    Column("user_id", String(128), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("post_id", "user_id", name="uq_post_like_user"),
)


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings or environment.

    For testing, use TEST_DATABASE_URL if available.
    """
    test_url = os.getenv("TEST_DATABASE_URL")
    if test_url:
        return test_url

    return os.getenv("DATABASE_URL") or settings.DATABASE_URL


def build_engine(url: str) -> Engine:
    """Create an engine for url; SQLite gets a single shared connection."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=POOL_RECYCLE,
        echo=False,  # Set to True for SQL query logging
    )


def create_all_tables(engine: Engine):
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    metadata.create_all(bind=engine)


def drop_all_tables(engine: Engine):
    """
    Drop all tables defined in metadata.

    WARNING: This is destructive! Only use in tests or development.
    """
    metadata.drop_all(bind=engine)


def check_connection(engine: Engine) -> bool:
    """
    Check if database connection is available.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database connection check failed: {e}")
        return False
