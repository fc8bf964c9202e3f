"""
Database tables and transaction management with SQLAlchemy.

One keyed table holds the asset records; the ownership and value ledgers
keep their state in the same database so a single transaction can cover
asset metadata, token ownership and currency balances together.

Design Decisions:
- Synchronous sessions: no operation suspends halfway through
- One process-wide re-entrant lock serializes every transaction
- Nested transaction() calls join the outermost one, which alone commits
- Scaled integers are stored as decimal text so no driver can round them
"""

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Iterator

from sqlalchemy import Date, Integer, String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from tokenfactor.config import get_settings

logger = logging.getLogger(__name__)


class ExactInteger(TypeDecorator):
    """
    Arbitrary-size integer persisted as its decimal string.

    SQLite integers stop at 64 bits and NUMERIC columns may degrade to REAL;
    a text column keeps 256-bit values exact on every backend.
    """
    impl = String(80)
    cache_ok = True

    def process_bind_param(self, value: int | None, dialect) -> str | None:
        if value is None:
            return None
        return str(int(value))

    def process_result_value(self, value: str | None, dialect) -> int | None:
        if value is None:
            return None
        return int(value)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class AssetRow(Base):
    """Asset record keyed by asset number."""
    __tablename__ = "assets"

    asset_number: Mapped[int] = mapped_column(ExactInteger, primary_key=True)
    status: Mapped[str] = mapped_column(String(16), default="open")

    # Initial terms
    factoring_fee: Mapped[int] = mapped_column(ExactInteger)
    discount_fee: Mapped[int] = mapped_column(ExactInteger)
    late_fee: Mapped[int] = mapped_column(ExactInteger)
    bank_charges_fee: Mapped[int] = mapped_column(ExactInteger)
    additional_fee: Mapped[int] = mapped_column(ExactInteger)
    grace_period: Mapped[int] = mapped_column(ExactInteger)
    advance_ratio: Mapped[int] = mapped_column(ExactInteger)
    due_date: Mapped[date] = mapped_column(Date)
    invoice_date: Mapped[date] = mapped_column(Date)
    funds_advanced_date: Mapped[date] = mapped_column(Date)
    invoice_amount: Mapped[int] = mapped_column(ExactInteger)
    invoice_limit: Mapped[int] = mapped_column(ExactInteger)

    # Settlement terms
    payment_receipt_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    buyer_amount_received: Mapped[int] = mapped_column(ExactInteger, default=0)
    supplier_amount_received: Mapped[int] = mapped_column(ExactInteger, default=0)
    payment_reserve_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    supplier_amount_reserved: Mapped[int] = mapped_column(ExactInteger, default=0)
    reserve_payment_transaction_id: Mapped[str | None] = mapped_column(String(256), nullable=True)


class TokenRow(Base):
    """Ownership record of one asset token."""
    __tablename__ = "tokens"

    token_id: Mapped[int] = mapped_column(ExactInteger, primary_key=True)
    owner: Mapped[str] = mapped_column(String(128), index=True)
    approved: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # Enumeration order: global mint order and per-owner acquisition order
    mint_sequence: Mapped[int] = mapped_column(Integer, index=True)
    owner_sequence: Mapped[int] = mapped_column(Integer)


class OperatorApprovalRow(Base):
    """Holder-wide approval of an operator over all of the holder's tokens."""
    __tablename__ = "operator_approvals"

    owner: Mapped[str] = mapped_column(String(128), primary_key=True)
    operator: Mapped[str] = mapped_column(String(128), primary_key=True)


class BalanceRow(Base):
    """Settlement currency balance of one holder."""
    __tablename__ = "balances"

    holder: Mapped[str] = mapped_column(String(128), primary_key=True)
    amount: Mapped[int] = mapped_column(ExactInteger, default=0)


class AllowanceRow(Base):
    """Amount a spender may move out of an owner's balance."""
    __tablename__ = "allowances"

    owner: Mapped[str] = mapped_column(String(128), primary_key=True)
    spender: Mapped[str] = mapped_column(String(128), primary_key=True)
    amount: Mapped[int] = mapped_column(ExactInteger, default=0)


class Database:
    """
    Engine, session factory and the serialized transaction boundary.

    Usage:
        with db.transaction() as session:
            session.add(row)
        # committed here, or rolled back if the block raised
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        engine_kwargs: dict = {}
        if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith(":")):
            # Every session must see the same in-memory database
            engine_kwargs = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        self.engine = create_engine(url, echo=echo, **engine_kwargs)
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)
        self._lock = threading.RLock()
        self._local = threading.local()
        logger.info(f"Database engine created for {self.engine.url.render_as_string(hide_password=True)}")

    def create_all(self) -> None:
        """Create missing tables."""
        Base.metadata.create_all(self.engine)
        logger.info("Database tables initialized")

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Run a block as one all-or-nothing unit.

        Re-entrant: a call made while a transaction is already open on this
        thread reuses its session, and the outermost block decides whether
        everything commits or rolls back.
        """
        with self._lock:
            current: Session | None = getattr(self._local, "session", None)
            if current is not None:
                yield current
                return

            session = self._session_factory()
            self._local.session = session
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                self._local.session = None
                session.close()


# Process-wide database (initialized lazily)
_database: Database | None = None


def get_database() -> Database:
    """Get or create the configured database."""
    global _database
    if _database is None:
        settings = get_settings()
        _database = Database(settings.database_url, echo=settings.debug)
    return _database


def init_db() -> Database:
    """
    Initialize database tables.

    Call this on application startup to ensure tables exist.
    """
    database = get_database()
    database.create_all()
    return database


def close_db() -> None:
    """Close database connections on shutdown."""
    global _database
    if _database is not None:
        _database.dispose()
        _database = None
    logger.info("Database connections closed")
