# spending_api/schemas.py
from datetime import date
from decimal import Decimal
from typing import Annotated, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Amounts stay exact in Python and go over the wire as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# --- Store records ---

class UserRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    firebase_uid: str
    email: str


class TransactionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: Decimal
    category: str
    merchant: str
    transaction_date: date


class CategoryTotal(BaseModel):
    category: str
    total: Decimal


class InsightsSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_spent: Decimal
    transaction_count: int
    by_category: Tuple[CategoryTotal, ...]


# --- API bodies ---
# Request fields are optional strings so that missing values reach our own
# validation and come back as 400s with a readable message.

class RegisterRequest(BaseModel):
    email: Optional[str] = None


class RegisterResponse(BaseModel):
    success: bool
    message: str


class CreateSpendingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: Optional[str] = None
    category: Optional[str] = None
    merchant: Optional[str] = None
    transaction_date: Optional[str] = Field(default=None, alias="transactionDate")


class SuccessResponse(BaseModel):
    success: bool = True


class SpendingItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    amount: Money
    category: str
    merchant: str
    transaction_date: date = Field(serialization_alias="transactionDate")

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "SpendingItem":
        return cls(
            id=record.id,
            amount=record.amount,
            category=record.category,
            merchant=record.merchant,
            transaction_date=record.transaction_date,
        )


class CategoryInsight(BaseModel):
    category: str
    total: Money


class InsightsResponse(BaseModel):
    total_spent: Money = Field(serialization_alias="totalSpent")
    transaction_count: int = Field(serialization_alias="transactionCount")
    by_category: List[CategoryInsight] = Field(serialization_alias="byCategory")

    @classmethod
    def from_snapshot(cls, snapshot: InsightsSnapshot) -> "InsightsResponse":
        return cls(
            total_spent=snapshot.total_spent,
            transaction_count=snapshot.transaction_count,
            by_category=[
                CategoryInsight(category=item.category, total=item.total)
                for item in snapshot.by_category
            ],
        )
