# spending_api/validation.py
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .errors import ValidationError
from .schemas import CreateSpendingRequest

AMOUNT_PATTERN = re.compile(r"^\d+(\.\d{1,2})?$", re.ASCII)
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
CENTS = Decimal("0.01")
# NUMERIC(12, 2) leaves ten digits before the point
MAX_AMOUNT = Decimal("9999999999.99")


@dataclass(frozen=True)
class NewTransaction:
    amount: Decimal
    category: str
    merchant: str
    transaction_date: date


def require_text(value: Optional[str], label: str) -> str:
    """Returns the trimmed value, or raises if it is missing or blank."""
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


def normalize_amount(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(raw: str) -> Decimal:
    """
    Parses a positive decimal amount with at most two fractional digits.

    Args:
        raw: The amount as sent by the client, e.g. "12.5"

    Returns:
        Decimal: The amount with exactly two fractional digits

    Raises:
        ValidationError: If the string is not a plain decimal, has more than
            two fractional digits, is zero, or is too large to store
    """
    value = raw.strip()
    if not AMOUNT_PATTERN.match(value):
        raise ValidationError("Amount must have up to 2 decimal places")

    amount = Decimal(value)
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    if amount > MAX_AMOUNT:
        raise ValidationError("Amount is too large")
    return normalize_amount(amount)


def parse_transaction_date(raw: str, today: Optional[date] = None) -> date:
    value = raw.strip()
    # fromisoformat also takes compact and week dates on newer Pythons
    if not DATE_PATTERN.match(value):
        raise ValidationError("Transaction date must be a date in YYYY-MM-DD format")
    try:
        transaction_date = date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Transaction date must be a date in YYYY-MM-DD format")

    if transaction_date > (today or date.today()):
        raise ValidationError("Transaction date cannot be in the future")
    return transaction_date


def validate_new_transaction(request: CreateSpendingRequest, today: Optional[date] = None) -> NewTransaction:
    """
    Checks a create-spending body field by field, in the order the client
    form shows them, and returns the cleaned values.

    Raises:
        ValidationError: On the first field that fails
    """
    amount_raw = require_text(request.amount, "Amount")
    category = require_text(request.category, "Category")
    merchant = require_text(request.merchant, "Merchant")
    date_raw = require_text(request.transaction_date, "Transaction date")

    return NewTransaction(
        amount=parse_amount(amount_raw),
        category=category,
        merchant=merchant,
        transaction_date=parse_transaction_date(date_raw, today),
    )
