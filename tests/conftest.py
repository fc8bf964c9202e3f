"""Pytest configuration and fixtures."""

from dataclasses import dataclass
from datetime import date

import pytest

from tokenfactor.domain.models import InitialTerms
from tokenfactor.infrastructure.database import Database
from tokenfactor.infrastructure.ledgers import SqlOwnershipLedger, SqlValueLedger
from tokenfactor.services.asset_store import AssetStore
from tokenfactor.services.exchange import Exchange
from tokenfactor.services.registry import AssetRegistry

ADMIN = "admin"
EXCHANGE = "exchange"


@dataclass(frozen=True)
class ReferenceCase:
    """One worked invoice from the factoring reference data set (hundredths)."""
    factoring_fee: int
    discount_fee: int
    late_fee: int
    bank_charges_fee: int
    grace_period: int
    advance_ratio: int
    due_date: date
    invoice_date: date
    funds_advanced_date: date
    invoice_amount: int
    invoice_limit: int
    payment_receipt_date: date
    # Expected figures
    invoice_tenure: int
    advanced_amount: int
    reserve_amount: int
    late_days: int
    finance_tenure: int
    late_amount: int
    factoring_amount: int

    def terms(self, additional_fee: int = 0) -> InitialTerms:
        return InitialTerms(
            factoring_fee=self.factoring_fee,
            discount_fee=self.discount_fee,
            late_fee=self.late_fee,
            bank_charges_fee=self.bank_charges_fee,
            additional_fee=additional_fee,
            grace_period=self.grace_period,
            advance_ratio=self.advance_ratio,
            due_date=self.due_date,
            invoice_date=self.invoice_date,
            funds_advanced_date=self.funds_advanced_date,
            invoice_amount=self.invoice_amount,
            invoice_limit=self.invoice_limit,
        )


REFERENCE_CASES = [
    ReferenceCase(50, 500, 1800, 1000, 3, 8500, date(2022, 11, 12), date(2022, 10, 10), date(2022, 10, 13),
                  1_000_000, 1_000_000, date(2022, 11, 15), 33, 850_000, 150_000, 0, 33, 0, 5_000),
    ReferenceCase(75, 500, 1800, 1000, 5, 8000, date(2022, 12, 15), date(2022, 10, 11), date(2022, 10, 25),
                  1_000_000, 900_000, date(2022, 12, 22), 65, 720_000, 280_000, 2, 58, 710, 7_500),
    ReferenceCase(100, 500, 1800, 1000, 3, 7500, date(2023, 1, 23), date(2022, 10, 12), date(2022, 11, 5),
                  1_000_000, 800_000, date(2023, 1, 20), 103, 600_000, 400_000, 0, 76, 0, 10_000),
    ReferenceCase(150, 550, 1800, 1000, 3, 8000, date(2023, 1, 30), date(2022, 10, 13), date(2022, 11, 6),
                  1_000_000, 800_000, date(2023, 2, 2), 109, 640_000, 360_000, 0, 88, 0, 15_000),
    ReferenceCase(200, 600, 1800, 1000, 3, 8500, date(2023, 1, 25), date(2022, 10, 14), date(2022, 11, 7),
                  1_000_000, 700_000, date(2023, 1, 21), 103, 595_000, 405_000, 0, 75, 0, 20_000),
    ReferenceCase(175, 500, 1800, 1000, 3, 9000, date(2023, 2, 1), date(2022, 10, 13), date(2022, 11, 15),
                  1_000_000, 1_000_000, date(2023, 2, 5), 111, 900_000, 100_000, 1, 82, 443, 17_500),
    ReferenceCase(227, 750, 1800, 1000, 3, 8000, date(2023, 2, 15), date(2022, 10, 14), date(2022, 11, 30),
                  1_000_000, 850_000, date(2023, 2, 10), 124, 680_000, 320_000, 0, 72, 0, 22_700),
    ReferenceCase(227, 750, 1800, 1000, 3, 8700, date(2023, 2, 10), date(2022, 10, 1), date(2022, 11, 1),
                  1_000_000, 500_000, date(2023, 3, 10), 132, 435_000, 565_000, 25, 129, 5_363, 22_700),
    ReferenceCase(227, 750, 1800, 1000, 3, 7000, date(2023, 1, 10), date(2022, 10, 1), date(2022, 11, 1),
                  1_000_000, 800_000, date(2023, 3, 10), 101, 560_000, 440_000, 56, 129, 15_465, 22_700),
    ReferenceCase(227, 750, 1800, 0, 3, 9000, date(2023, 1, 10), date(2022, 10, 1), date(2022, 11, 1),
                  1_000_000, 800_000, date(2023, 2, 10), 101, 720_000, 280_000, 28, 101, 9_941, 22_700),
]


@pytest.fixture(params=range(len(REFERENCE_CASES)), ids=lambda i: f"case{i + 1}")
def reference_case(request) -> ReferenceCase:
    """Each reference invoice in turn."""
    return REFERENCE_CASES[request.param]


@pytest.fixture
def example_terms() -> InitialTerms:
    """Invoice of 10000.00 with limit 8500.00 at 80% advance, tenure 124 days."""
    return REFERENCE_CASES[6].terms()


@pytest.fixture
def short_terms() -> InitialTerms:
    """Terms whose due date is only 19 days after the invoice date."""
    return InitialTerms(
        factoring_fee=227,
        discount_fee=750,
        late_fee=1800,
        bank_charges_fee=1000,
        additional_fee=0,
        grace_period=3,
        advance_ratio=8000,
        due_date=date(2022, 11, 2),
        invoice_date=date(2022, 10, 14),
        funds_advanced_date=date(2022, 10, 20),
        invoice_amount=1_000_000,
        invoice_limit=850_000,
    )


@pytest.fixture
def database() -> Database:
    """Fresh in-memory database with all tables."""
    db = Database("sqlite+pysqlite:///:memory:")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def store(database: Database) -> AssetStore:
    return AssetStore(database)


@pytest.fixture
def ownership(database: Database) -> SqlOwnershipLedger:
    return SqlOwnershipLedger(database)


@pytest.fixture
def value(database: Database) -> SqlValueLedger:
    return SqlValueLedger(database)


@pytest.fixture
def registry(database: Database, store: AssetStore, ownership: SqlOwnershipLedger) -> AssetRegistry:
    return AssetRegistry(database, store, ownership, administrator=ADMIN, base_uri="https://ipfs.io/ipfs/")


@pytest.fixture
def exchange(database: Database, registry: AssetRegistry, value: SqlValueLedger) -> Exchange:
    return Exchange(database, registry, value, identity=EXCHANGE)
