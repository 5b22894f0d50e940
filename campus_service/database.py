"""
Database connection and schema management
"""
import asyncpg
from typing import Optional, List, Dict, Any
import logging

from .config import settings
from .errors import StoreFailure

logger = logging.getLogger(__name__)

STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        course TEXT,
        batch TEXT,
        bio TEXT NOT NULL DEFAULT '',
        profile_pic TEXT NOT NULL DEFAULT 'default-profile.png',
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS groups (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        creator_id INTEGER,
        is_pre_created BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS uq_groups_pre_created_name
    ON groups (name) WHERE is_pre_created
    """,
    """
    CREATE TABLE IF NOT EXISTS group_members (
        id SERIAL PRIMARY KEY,
        group_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'approved')),
        created_at TIMESTAMP NOT NULL DEFAULT NOW(),
        UNIQUE (group_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS follows (
        id SERIAL PRIMARY KEY,
        follower_id INTEGER NOT NULL,
        target_id INTEGER NOT NULL,
        type TEXT NOT NULL CHECK (type IN ('user', 'group')),
        created_at TIMESTAMP NOT NULL DEFAULT NOW(),
        UNIQUE (follower_id, target_id, type)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id SERIAL PRIMARY KEY,
        author_id INTEGER NOT NULL,
        group_id INTEGER,
        content TEXT NOT NULL DEFAULT '',
        image TEXT,
        is_public BOOLEAN NOT NULL,
        likes INTEGER NOT NULL DEFAULT 0 CHECK (likes >= 0),
        created_at TIMESTAMP NOT NULL DEFAULT NOW(),
        CHECK (NOT (is_public AND group_id IS NOT NULL))
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_posts_created
    ON posts (created_at DESC, id ASC)
    """,
    """
    CREATE TABLE IF NOT EXISTS comments (
        id SERIAL PRIMARY KEY,
        post_id INTEGER NOT NULL,
        author_id INTEGER NOT NULL,
        content TEXT NOT NULL,
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS messages (
        id SERIAL PRIMARY KEY,
        sender_id INTEGER NOT NULL,
        receiver_id INTEGER NOT NULL,
        content TEXT NOT NULL,
        created_at TIMESTAMP NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_messages_pair
    ON messages (sender_id, receiver_id, created_at)
    """,
]


class Database:
    """PostgreSQL database connection manager using asyncpg

    Every statement failure surfaces as StoreFailure; nothing is retried.
    """

    def __init__(self):
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self):
        """Create database connection pool"""
        try:
            self.pool = await asyncpg.create_pool(
                settings.DATABASE_URL,
                min_size=1,
                max_size=settings.DB_POOL_SIZE,
                command_timeout=settings.DB_COMMAND_TIMEOUT,
            )
            logger.info("Database connection pool created successfully")
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    async def disconnect(self):
        """Close database connection pool"""
        if self.pool:
            await self.pool.close()
            logger.info("Database connection pool closed")

    async def init_schema(self):
        """Create tables and indexes if missing"""
        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    for statement in SCHEMA_STATEMENTS:
                        await conn.execute(statement)
        except STORE_ERRORS as e:
            logger.error(f"Schema initialization failed: {e}")
            raise StoreFailure("Schema initialization failed") from e
        logger.info("Database schema initialized successfully")

    async def fetch_one(self, query: str, *args) -> Optional[Dict[str, Any]]:
        """Fetch a single row"""
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, *args)
                return dict(row) if row else None
        except STORE_ERRORS as e:
            logger.error(f"Query failed: {e}")
            raise StoreFailure("Store query failed") from e

    async def fetch_all(self, query: str, *args) -> List[Dict[str, Any]]:
        """Fetch all rows"""
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(query, *args)
                return [dict(row) for row in rows]
        except STORE_ERRORS as e:
            logger.error(f"Query failed: {e}")
            raise StoreFailure("Store query failed") from e

    async def execute(self, query: str, *args) -> str:
        """Execute a query and return the status tag, e.g. 'UPDATE 1'"""
        try:
            async with self.pool.acquire() as conn:
                return await conn.execute(query, *args)
        except STORE_ERRORS as e:
            logger.error(f"Statement failed: {e}")
            raise StoreFailure("Store write failed") from e


def affected_rows(status_tag: str) -> int:
    """Row count from an asyncpg status tag ('INSERT 0 1', 'UPDATE 3')"""
    try:
        return int(status_tag.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


# Global database instance
db = Database()


async def get_db() -> Database:
    """Dependency for getting database instance"""
    return db
