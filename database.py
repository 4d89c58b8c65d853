"""
Database connection management and utilities
Async PostgreSQL operations using asyncpg
"""

import asyncpg
import contextvars
import logging
from typing import Optional, List, Any
from contextlib import asynccontextmanager

from config import DatabaseConfig
from errors import ArgumentMissingError

_current_db: contextvars.ContextVar[Optional["DatabaseConnection"]] = contextvars.ContextVar(
    "current_db", default=None
)


class DatabaseConnection:
    """
    Manages PostgreSQL connection pool and provides database operations

    The connection is safe for concurrent use by multiple tasks and is meant
    to be long-lived: connect once, share it, disconnect at shutdown.
    """

    def __init__(self, config: DatabaseConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = (logger or logging.getLogger("sql")).getChild("db")

    async def connect(self):
        """Initialize connection pool"""
        if self.pool is not None:
            self.logger.warning("Connection pool already initialized")
            return

        try:
            self.pool = await asyncpg.create_pool(
                host=self.config.host,
                port=self.config.port,
                database=self.config.database,
                user=self.config.user,
                password=self.config.password,
                min_size=self.config.min_pool_size,
                max_size=self.config.max_pool_size,
                command_timeout=self.config.command_timeout,
                ssl=self.config.ssl,
            )
            self.logger.info(f"Connected to PostgreSQL at {self.config.host}:{self.config.port}")

        except Exception as e:
            self.logger.error(f"Failed to connect to database: {e}")
            raise

    async def disconnect(self):
        """Close connection pool"""
        if self.pool is not None:
            self.logger.info("Closing Database Connection")
            await self.pool.close()
            self.pool = None

    @asynccontextmanager
    async def acquire(self):
        """
        Acquire a connection from the pool with automatic error handling.

        Usage:
            async with db.acquire() as conn:
                result = await conn.fetch("SELECT * FROM person")
        """
        if self.pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self.pool.acquire() as connection:
            try:
                yield connection
            except Exception as e:
                self.logger.error(f"Error during database operation: {e}", exc_info=True)
                try:
                    await connection.reset()
                except Exception as reset_error:
                    self.logger.error(f"Failed to reset connection: {reset_error}")
                raise

    async def execute(self, query: str, *args, timeout: Optional[float] = None) -> str:
        """
        Execute a query without returning results

        Returns:
            Status string (e.g., "INSERT 0 1")
        """
        async with self.acquire() as conn:
            return await conn.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: Optional[float] = None) -> List[asyncpg.Record]:
        """Fetch multiple rows"""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args, timeout: Optional[float] = None) -> Optional[asyncpg.Record]:
        """Fetch a single row"""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args, timeout=timeout)

    async def fetchval(self, query: str, *args, column: int = 0, timeout: Optional[float] = None) -> Any:
        """Fetch a single value"""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args, column=column, timeout=timeout)

    async def execute_many(self, query: str, args_list: List[tuple], timeout: Optional[float] = None):
        """Execute a query multiple times with different parameters"""
        async with self.acquire() as conn:
            await conn.executemany(query, args_list, timeout=timeout)

    @asynccontextmanager
    async def transaction(self):
        """
        Execute operations within a transaction

        Usage:
            async with db.transaction() as conn:
                await conn.execute("INSERT INTO ...")
                await conn.execute("UPDATE ...")
        """
        async with self.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def ping(self):
        """
        Verify the database is still reachable

        Raises:
            RuntimeError: not connected
            asyncpg / OS errors: server unreachable
        """
        result = await self.fetchval("SELECT 1")
        if result != 1:
            raise RuntimeError(f"Unexpected ping result: {result!r}")

    async def check_connection(self) -> bool:
        """
        Check if database connection is healthy

        Returns:
            True if connection is healthy
        """
        try:
            await self.ping()
            return True
        except Exception as e:
            self.logger.error(f"Connection check failed: {e}")
            return False

    def to_context(self, ctx: Optional[contextvars.Context] = None) -> contextvars.Context:
        """
        Store this connection in a copy of the given (or current) context

        Usage:
            ctx = db.to_context()
            ctx.run(handler)   # from_context() returns db inside handler
        """
        ctx = (ctx if ctx is not None else contextvars.copy_context()).copy()
        ctx.run(_current_db.set, self)
        return ctx


def from_context(ctx: Optional[contextvars.Context] = None) -> DatabaseConnection:
    """
    Retrieve the DatabaseConnection stored in the given (or current) context

    Raises:
        ArgumentMissingError: no connection is stored
    """
    db = ctx.get(_current_db) if ctx is not None else _current_db.get()
    if db is None:
        raise ArgumentMissingError("DB")
    return db


class DatabaseMiddleware:
    """
    ASGI middleware making a DatabaseConnection available to request handlers

    Usage:
        app = FastAPI()
        app.add_middleware(DatabaseMiddleware, db=db)

        @app.get("/person")
        async def persons(request: Request):
            db = from_context()
            queries = Queries.from_request(request)
    """

    def __init__(self, app, db: DatabaseConnection):
        self.app = app
        self.db = db

    async def __call__(self, scope, receive, send):
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        token = _current_db.set(self.db)
        try:
            await self.app(scope, receive, send)
        finally:
            _current_db.reset(token)


# Singleton instance
_db_instance: Optional[DatabaseConnection] = None


def get_database(config: Optional[DatabaseConfig] = None) -> DatabaseConnection:
    """
    Get or create database connection instance

    Args:
        config: Database configuration (uses environment if not provided)
    """
    global _db_instance

    if _db_instance is None:
        if config is None:
            config = DatabaseConfig.from_environment()
        _db_instance = DatabaseConnection(config)

    return _db_instance


async def init_database(config: Optional[DatabaseConfig] = None) -> DatabaseConnection:
    """Initialize database connection"""
    db = get_database(config)
    await db.connect()
    return db


async def close_database():
    """Close database connection"""
    global _db_instance

    if _db_instance is not None:
        await _db_instance.disconnect()
        _db_instance = None
