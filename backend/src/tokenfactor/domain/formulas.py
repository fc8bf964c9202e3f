"""
Financial formulas for invoice factoring.

Pure functions deriving every monetary figure of a factored invoice from its
primitive terms. No state, no storage, no I/O.

Conventions:
- Amounts are integers in hundredths of the settlement currency
- Fee rates and the advance ratio are integers in hundredths of a percent
- Dates are ``date``/``datetime`` values or Unix seconds; ``None``/``0`` = unset
- Each division truncates toward zero and is applied left to right

Design Decisions:
- Fee products are reduced to an annual amount before the day-count step,
  so ``discount_amount`` and ``late_amount`` share one rounding path
- Out-of-range intermediates raise ``ArithmeticOverflow`` instead of wrapping
- ``reserve_amount`` and ``net_amount_payable_to_client`` are signed; a
  negative figure is meaningful (money owed back) and is not clamped
"""

from datetime import date, datetime

from .fixed_point import (
    DAYS_PER_YEAR,
    PERCENT_BASE,
    checked_int,
    checked_uint,
    days_between,
    to_timestamp,
    trunc_div,
)

DateLike = date | datetime | int | None


def invoice_tenure(due_date: DateLike, invoice_date: DateLike) -> int:
    """Days between invoice date and due date."""
    return checked_int(days_between(due_date, invoice_date), "invoice tenure")


def late_days(
    payment_receipt_date: DateLike,
    due_date: DateLike,
    grace_period: int,
) -> int:
    """
    Days the payment arrived after the due date plus grace period.

    Returns 0 when the payment receipt date is unset or the payment landed
    within the grace period.
    """
    if to_timestamp(payment_receipt_date) is None:
        return 0
    overdue = days_between(payment_receipt_date, due_date) - grace_period
    return max(0, checked_int(overdue, "late days"))


def finance_tenure(
    payment_receipt_date: DateLike,
    funds_advanced_date: DateLike,
    *,
    due_date: DateLike,
    invoice_date: DateLike,
) -> int:
    """
    Days the advance was outstanding.

    While the payment receipt date is unset the full invoice tenure is used
    instead, as if the buyer were going to pay exactly on the due date.

    Raises:
        ValueError: if the receipt date and an invoice date are both unset.
            Stored assets always carry invoice dates, so this only signals a
            caller passing ``None`` for them.
    """
    if to_timestamp(payment_receipt_date) is None:
        if to_timestamp(due_date) is None or to_timestamp(invoice_date) is None:
            raise ValueError("due_date and invoice_date are required while the payment receipt date is unset")
        return invoice_tenure(due_date, invoice_date)
    return checked_int(days_between(payment_receipt_date, funds_advanced_date), "finance tenure")


def advanced_amount(invoice_limit: int, advance_ratio: int) -> int:
    """Amount paid upfront to the client: limit times advance ratio."""
    product = checked_uint(invoice_limit, "invoice limit") * checked_uint(advance_ratio, "advance ratio")
    return trunc_div(checked_uint(product, "advanced amount"), PERCENT_BASE)


def reserve_amount(invoice_amount: int, advanced_amount: int) -> int:
    """Amount held back pending settlement. May be negative."""
    return checked_int(invoice_amount - advanced_amount, "reserve amount")


def factoring_amount(invoice_amount: int, factoring_fee: int) -> int:
    """Flat factoring fee charged on the invoice amount."""
    product = checked_uint(invoice_amount, "invoice amount") * checked_uint(factoring_fee, "factoring fee")
    return trunc_div(checked_uint(product, "factoring amount"), PERCENT_BASE)


def _prorated_fee(advanced: int, annual_rate: int, days: int, label: str) -> int:
    """Annual fee on the advanced amount, prorated over ``days`` of a 365-day year."""
    yearly = trunc_div(
        checked_uint(checked_uint(advanced, "advanced amount") * checked_uint(annual_rate, label), label),
        PERCENT_BASE,
    )
    return trunc_div(checked_uint(yearly * checked_uint(days, f"{label} days"), label), DAYS_PER_YEAR)


def discount_amount(
    discount_fee: int,
    finance_tenure: int,
    late_days: int,
    advanced_amount: int,
) -> int:
    """Discount charged on the advance for the finance tenure plus late days."""
    return _prorated_fee(advanced_amount, discount_fee, finance_tenure + late_days, "discount amount")


def late_amount(late_fee: int, late_days: int, advanced_amount: int) -> int:
    """Late charge on the advance for each late day."""
    return _prorated_fee(advanced_amount, late_fee, late_days, "late amount")


def total_fees(
    factoring_amount: int,
    discount_amount: int,
    additional_fee: int,
    bank_charges_fee: int,
) -> int:
    """Sum of all fees charged to the client."""
    total = (
        checked_uint(factoring_amount, "factoring amount")
        + checked_uint(discount_amount, "discount amount")
        + checked_uint(additional_fee, "additional fee")
        + checked_uint(bank_charges_fee, "bank charges fee")
    )
    return checked_uint(total, "total fees")


def total_amount_received(buyer_amount_received: int, supplier_amount_received: int) -> int:
    """Everything received from buyer and supplier. Exact, no rounding."""
    total = checked_uint(buyer_amount_received, "buyer amount") + checked_uint(
        supplier_amount_received, "supplier amount"
    )
    return checked_uint(total, "total amount received")


def net_amount_payable_to_client(
    total_amount_received: int,
    advanced_amount: int,
    total_fees: int,
) -> int:
    """
    Amount to disburse to the client once collections are in.

    A negative result is the amount the client owes back.
    """
    return checked_int(total_amount_received - advanced_amount - total_fees, "net amount payable")


def short_excess_payment_received(total_amount_received: int, invoice_amount: int) -> int:
    """Collections minus invoice amount: negative for short, positive for excess payment."""
    return checked_int(total_amount_received - invoice_amount, "short/excess payment")
