# tests/test_validation.py
import pytest
from datetime import date
from decimal import Decimal

from spending_api.errors import ValidationError
from spending_api.schemas import CreateSpendingRequest
from spending_api.validation import (
    normalize_amount,
    parse_amount,
    parse_transaction_date,
    validate_new_transaction,
)

TODAY = date(2024, 6, 15)


@pytest.mark.parametrize("raw, expected", [
    ("12.5", "12.50"),
    ("12", "12.00"),
    (" 0.01 ", "0.01"),
    ("9999999999.99", "9999999999.99"),
])
def test_parse_amount_normalizes_to_cents(raw, expected):
    amount = parse_amount(raw)
    assert amount == Decimal(expected)
    assert str(amount) == expected
    assert amount > 0


@pytest.mark.parametrize("raw", [
    "12.345", "abc", "0", "0.00", "-1", "1,50", ".5", "10000000000",
    # non-ASCII digits
    "١٢.٥", "１２",
])
def test_parse_amount_rejects(raw):
    with pytest.raises(ValidationError):
        parse_amount(raw)


def test_normalize_amount_rounds_half_up():
    assert normalize_amount(Decimal("2.345")) == Decimal("2.35")
    assert normalize_amount(Decimal("2.344")) == Decimal("2.34")
    assert normalize_amount(Decimal("0.005")) == Decimal("0.01")


def test_parse_transaction_date_today_is_allowed():
    assert parse_transaction_date("2024-06-15", today=TODAY) == TODAY


def test_parse_transaction_date_future_fails():
    with pytest.raises(ValidationError) as excinfo:
        parse_transaction_date("2024-06-16", today=TODAY)
    assert "future" in excinfo.value.message


@pytest.mark.parametrize("raw", ["15/06/2024", "20240101", "2024-W01-1", "2024W011", "2024-1-1", "２０２４-01-01"])
def test_parse_transaction_date_garbage_fails(raw):
    with pytest.raises(ValidationError) as excinfo:
        parse_transaction_date(raw, today=TODAY)
    assert "YYYY-MM-DD" in excinfo.value.message


def test_validate_new_transaction_reports_first_missing_field():
    request = CreateSpendingRequest(amount="5", category="", merchant=None, transactionDate="2024-01-01")
    with pytest.raises(ValidationError) as excinfo:
        validate_new_transaction(request, today=TODAY)
    assert excinfo.value.message == "Category is required"


def test_validate_new_transaction_cleans_values():
    request = CreateSpendingRequest(amount="7.1", category=" Food ", merchant=" Cafe", transactionDate="2024-01-01")
    new = validate_new_transaction(request, today=TODAY)
    assert new.amount == Decimal("7.10")
    assert new.category == "Food"
    assert new.merchant == "Cafe"
    assert new.transaction_date == date(2024, 1, 1)
