# spending_api/service.py
from typing import List

from .insights import InsightsAggregator, InsightsCache
from .schemas import InsightsSnapshot, TransactionRecord, UserRecord
from .transactions import TransactionStore
from .users import UserStore
from .validation import NewTransaction


class SpendingService:
    """Everything the routes need, wired from explicitly passed collaborators."""

    def __init__(self, transactions: TransactionStore, users: UserStore, cache: InsightsCache):
        self.transactions = transactions
        self.users = users
        self.insights = InsightsAggregator(transactions, cache)

    def register_user(self, external_id: str, email: str) -> UserRecord:
        return self.users.register(external_id, email)

    def create_transaction(self, external_id: str, new: NewTransaction) -> TransactionRecord:
        record = self.transactions.create(external_id, new)
        # The row is committed at this point; evict before the caller sees success
        self.insights.invalidate(external_id)
        return record

    def list_transactions(self, external_id: str) -> List[TransactionRecord]:
        return self.transactions.list(external_id)

    def get_insights(self, external_id: str) -> InsightsSnapshot:
        return self.insights.get_insights(external_id)
