"""Tests for domain models."""

from dataclasses import FrozenInstanceError, replace
from datetime import date, datetime
from types import SimpleNamespace

import pytest

from tokenfactor.domain import formulas
from tokenfactor.domain.models import (
    AssetFigures,
    AssetRecord,
    AssetStatus,
    InitialTerms,
    SettlementTerms,
)


class TestInitialTerms:
    def test_creation(self, example_terms: InitialTerms) -> None:
        assert example_terms.invoice_amount == 1_000_000
        assert example_terms.advance_ratio == 8_000
        assert example_terms.invoice_tenure == 124

    def test_frozen(self, example_terms: InitialTerms) -> None:
        with pytest.raises(FrozenInstanceError):
            example_terms.invoice_amount = 1  # type: ignore[misc]

    def test_float_rejected(self, example_terms: InitialTerms) -> None:
        with pytest.raises(TypeError, match="factoring_fee"):
            replace(example_terms, factoring_fee=2.27)

    def test_negative_rejected(self, example_terms: InitialTerms) -> None:
        with pytest.raises(ValueError, match="invoice_limit"):
            replace(example_terms, invoice_limit=-1)

    def test_bool_rejected(self, example_terms: InitialTerms) -> None:
        with pytest.raises(TypeError):
            replace(example_terms, grace_period=True)

    def test_date_required(self, example_terms: InitialTerms) -> None:
        with pytest.raises(TypeError, match="due_date"):
            replace(example_terms, due_date="2023-02-15")

    def test_datetime_reduced_to_date(self, example_terms: InitialTerms) -> None:
        terms = replace(example_terms, due_date=datetime(2023, 2, 15, 18, 45))
        assert terms.due_date == date(2023, 2, 15)
        assert type(terms.due_date) is date


class TestAssetRecord:
    def test_defaults(self, example_terms: InitialTerms) -> None:
        record = AssetRecord(asset_number=7, initial_terms=example_terms)

        assert record.status is AssetStatus.OPEN
        assert not record.settled
        assert record.settlement_terms == SettlementTerms()
        assert record.settlement_terms.payment_receipt_date is None

    def test_settled(self, example_terms: InitialTerms) -> None:
        record = AssetRecord(asset_number=7, initial_terms=example_terms, status=AssetStatus.SETTLED)
        assert record.settled


class TestAssetFigures:
    def test_paid_example(self, example_terms: InitialTerms) -> None:
        record = AssetRecord(
            asset_number=7,
            initial_terms=example_terms,
            settlement_terms=SettlementTerms(
                payment_receipt_date=date(2023, 2, 10),
                buyer_amount_received=1_100_000,
            ),
        )

        figures = AssetFigures.compute(record)

        assert figures.invoice_tenure == 124
        assert figures.late_days == 0
        assert figures.finance_tenure == 72
        assert figures.advanced_amount == 680_000
        assert figures.reserve_amount == 320_000
        assert figures.factoring_amount == 22_700
        assert figures.discount_amount == 10_060
        assert figures.late_amount == 0
        assert figures.total_fees == 33_760
        assert figures.total_amount_received == 1_100_000
        assert figures.net_amount_payable_to_client == 386_240
        assert figures.short_excess_payment_received == 100_000

    def test_unpaid_uses_invoice_tenure(self, example_terms: InitialTerms) -> None:
        figures = AssetFigures.compute(AssetRecord(asset_number=7, initial_terms=example_terms))

        assert figures.finance_tenure == 124
        assert figures.late_days == 0
        # 51000 a year over 124 days
        assert figures.discount_amount == 17_326
        assert figures.total_amount_received == 0
        assert figures.net_amount_payable_to_client == -680_000 - 22_700 - 17_326 - 1_000

    def test_custom_engine(self, example_terms: InitialTerms) -> None:
        public = {name: getattr(formulas, name) for name in dir(formulas) if not name.startswith("_")}
        engine = SimpleNamespace(**public)
        engine.factoring_amount = lambda invoice_amount, factoring_fee: 0

        figures = AssetFigures.compute(AssetRecord(asset_number=7, initial_terms=example_terms), engine)

        assert figures.factoring_amount == 0
        assert figures.total_fees == 17_326 + 1_000
