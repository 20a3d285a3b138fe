"""
Database schema and connection management.

Tables are declared with SQLAlchemy; the resource models talk to them
through Store, which runs hand-built parameterized statements.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .logger import get_logger

logger = get_logger()

Base = declarative_base()


class Company(Base):
    """Company model."""

    __tablename__ = "companies"
    __table_args__ = (
        CheckConstraint("num_employees >= 0", name="num_employees_non_negative"),
    )

    handle = Column(String(25), primary_key=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    num_employees = Column(Integer)
    logo_url = Column(Text)


class Job(Base):
    """Job posting model."""

    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint("salary >= 0", name="salary_non_negative"),
        CheckConstraint("equity >= 0 AND equity <= 1.0", name="equity_fraction"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    salary = Column(Integer)
    equity = Column(Numeric)
    company_handle = Column(
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_store_engine(url: str) -> Engine:
    """
    Create an engine for the given database URL.

    SQLite connections get foreign key enforcement switched on.
    """
    engine = create_engine(url)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_database(url: str) -> None:
    """
    Initialize database and create tables.

    Args:
        url: SQLAlchemy database URL
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
    engine = create_store_engine(url)
    Base.metadata.create_all(engine)
    engine.dispose()


def get_session(url: str):
    """
    Get database session.

    Args:
        url: SQLAlchemy database URL

    Returns:
        SQLAlchemy session
    """
    engine = create_store_engine(url)
    Session = sessionmaker(bind=engine)
    return Session()


def format_equity(value: Any) -> Optional[str]:
    """Stored equity as a decimal string ("0.1", "0"), or None."""
    if value is None:
        return None
    return format(Decimal(str(value)).normalize(), "f")


def placeholder(index: int) -> str:
    """Render the bind marker for the 1-based positional parameter `index`."""
    return f":p{index}"


class Store:
    """
    Parameterized-query execution over an engine.

    Positional params bind to placeholder(1), placeholder(2), ... in order.
    Each statement runs in its own transaction.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, url: str) -> "Store":
        return cls(create_store_engine(url))

    def execute(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        bound = {placeholder(i)[1:]: value for i, value in enumerate(params, start=1)}
        logger.debug("Executing statement", sql=" ".join(sql.split()), params=len(bound))
        logger.record_statement()
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(sql), bound)
                if not result.returns_rows:
                    return []
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            logger.record_statement_failure(type(e).__name__)
            logger.error("Statement failed", error=str(e).split("\n", 1)[0])
            raise

    def dispose(self) -> None:
        self.engine.dispose()
