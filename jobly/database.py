"""
Database schema and query execution.

Tables are declared with SQLAlchemy; queries are raw SQL with `$n`
positional placeholders run on an async engine (aiosqlite by default).
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    event,
    text,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base

from .logger import get_logger

Base = declarative_base()

logger = get_logger()

_PLACEHOLDER = re.compile(r"\$(\d+)")
_ILIKE = re.compile(r"\bILIKE\b")


class Company(Base):
    """Company table; `handle` is the natural key."""

    __tablename__ = "companies"
    __table_args__ = (
        CheckConstraint("num_employees >= 0", name="ck_companies_num_employees"),
    )

    handle = Column(String(25), primary_key=True)
    name = Column(Text, nullable=False, unique=True)
    num_employees = Column(Integer)
    description = Column(Text, nullable=False)
    logo_url = Column(Text)


class Job(Base):
    """Job table; equity is kept as decimal text."""

    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint("salary >= 0", name="ck_jobs_salary"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    salary = Column(Integer)
    equity = Column(Text)
    company_handle = Column(
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Query executor over a SQLAlchemy async engine.

    Each `query` call runs in its own transaction. Usable as an async
    context manager, which disposes the engine on exit.
    """

    def __init__(self, url: str, echo: bool = False):
        """
        Args:
            url: SQLAlchemy async URL, e.g. sqlite+aiosqlite:///data/jobly.db
            echo: Echo SQL through SQLAlchemy's own logger
        """
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        self.is_sqlite = self.engine.dialect.name == "sqlite"

        if self.is_sqlite:
            database = self.engine.url.database
            if database and database != ":memory:":
                Path(database).parent.mkdir(parents=True, exist_ok=True)
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async def __aenter__(self) -> "Database":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _compile(self, sql: str, values: Optional[Sequence[Any]]):
        """Rewrite `$n` placeholders into named binds for SQLAlchemy's text()."""
        params: Dict[str, Any] = {
            f"p{idx}": value for idx, value in enumerate(values or (), start=1)
        }
        sql = _PLACEHOLDER.sub(lambda m: f":p{m.group(1)}", sql)

        # SQLite's LIKE is already case-insensitive for ASCII
        if self.is_sqlite:
            sql = _ILIKE.sub("LIKE", sql)

        return text(sql), params

    async def query(self, sql: str, values: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute a statement and return its rows.

        Args:
            sql: SQL with `$1`, `$2`, ... placeholders
            values: Values bound to the placeholders, in order

        Returns:
            List of rows as column -> value dicts (empty if none returned)

        Raises:
            SQLAlchemyError: On any store-level failure (re-raised unchanged)
        """
        statement, params = self._compile(sql, values)
        logger.debug("Executing query", sql=" ".join(sql.split()), params=params)

        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(statement, params)
                rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
        except SQLAlchemyError as e:
            logger.record_query_failure(type(e).__name__)
            logger.error(f"Query failed: {e.__class__.__name__}", error=str(e))
            raise

        logger.record_query(len(rows))
        return rows

    async def init_schema(self) -> None:
        """Create all tables if they do not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema initialized", url=self.url)

    async def drop_schema(self) -> None:
        """Drop all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def close(self) -> None:
        await self.engine.dispose()
