# spending_api/transactions.py
import logging
from decimal import Decimal
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .errors import NotFoundError
from .models import SpendingTransaction, UserAccount
from .schemas import CategoryTotal, TransactionRecord
from .validation import NewTransaction, normalize_amount

logger = logging.getLogger(__name__)


class TransactionStore:
    def __init__(self, db: Session):
        self.db = db

    def _user_id_for(self, external_id: str):
        return self.db.execute(
            select(UserAccount.id).where(UserAccount.firebase_uid == external_id)
        ).scalar_one_or_none()

    def create(self, external_id: str, new: NewTransaction) -> TransactionRecord:
        """
        Persists a validated transaction for a registered user.

        Args:
            external_id: The identity provider uid of the owner
            new: Values that already passed boundary validation

        Raises:
            NotFoundError: If no account exists for the uid
        """
        user_id = self._user_id_for(external_id)
        if user_id is None:
            raise NotFoundError("User not found")

        transaction = SpendingTransaction(
            user_id=user_id,
            amount=normalize_amount(new.amount),
            category=new.category,
            merchant=new.merchant,
            transaction_date=new.transaction_date,
        )
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)

        logger.info("Stored transaction %s for user %s", transaction.id, external_id)
        return TransactionRecord.model_validate(transaction)

    def list(self, external_id: str) -> List[TransactionRecord]:
        """Most recent date first; entries on the same date newest first."""
        query = (
            select(SpendingTransaction)
            .join(UserAccount, SpendingTransaction.user_id == UserAccount.id)
            .where(UserAccount.firebase_uid == external_id)
            .order_by(SpendingTransaction.transaction_date.desc(), SpendingTransaction.id.desc())
        )
        rows = self.db.execute(query).scalars().all()
        return [TransactionRecord.model_validate(row) for row in rows]

    def sum_by_category(self, external_id: str) -> List[CategoryTotal]:
        query = (
            select(SpendingTransaction.category, func.sum(SpendingTransaction.amount))
            .join(UserAccount, SpendingTransaction.user_id == UserAccount.id)
            .where(UserAccount.firebase_uid == external_id)
            .group_by(SpendingTransaction.category)
            .order_by(SpendingTransaction.category)
        )
        return [
            # SQLite sums NUMERIC as float, so re-quantize
            CategoryTotal(category=category, total=normalize_amount(Decimal(str(total))))
            for category, total in self.db.execute(query).all()
        ]
