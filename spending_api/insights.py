# spending_api/insights.py
import logging
import threading
from decimal import Decimal
from typing import Dict, Optional

from .schemas import InsightsSnapshot
from .transactions import TransactionStore

logger = logging.getLogger(__name__)


class InsightsCache:
    """
    Per-user insights snapshots, shared by every request in the process.

    Entries never expire; they are only evicted when the user creates a
    transaction. Each key carries a generation number that eviction bumps,
    so a snapshot computed from a read that started before an eviction is
    dropped instead of stored.
    Generations are kept for every user that has ever been evicted (one int
    each) and are only reset by clear().
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, InsightsSnapshot] = {}
        self._generations: Dict[str, int] = {}

    def get(self, key: str) -> Optional[InsightsSnapshot]:
        with self._lock:
            return self._entries.get(key)

    def generation(self, key: str) -> int:
        with self._lock:
            return self._generations.get(key, 0)

    def put(self, key: str, snapshot: InsightsSnapshot, generation: int) -> bool:
        with self._lock:
            if self._generations.get(key, 0) != generation:
                logger.debug("Discarding insights for %s computed before an eviction", key)
                return False
            self._entries[key] = snapshot
            return True

    def evict(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1
        logger.debug("Evicted insights for %s", key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generations.clear()


def compute_insights(store: TransactionStore, external_id: str) -> InsightsSnapshot:
    """
    Builds a user's snapshot from two reads: the full transaction list for
    the total and count, and a grouped aggregation for the per-category sums.
    """
    transactions = store.list(external_id)
    total = sum((tx.amount for tx in transactions), Decimal("0.00"))

    return InsightsSnapshot(
        total_spent=total,
        transaction_count=len(transactions),
        by_category=tuple(store.sum_by_category(external_id)),
    )


class InsightsAggregator:
    def __init__(self, store: TransactionStore, cache: InsightsCache):
        self.store = store
        self.cache = cache

    def get_insights(self, external_id: str) -> InsightsSnapshot:
        cached = self.cache.get(external_id)
        if cached is not None:
            logger.debug("Insights cache hit for %s", external_id)
            return cached

        generation = self.cache.generation(external_id)
        snapshot = compute_insights(self.store, external_id)
        self.cache.put(external_id, snapshot, generation)
        return snapshot

    def invalidate(self, external_id: str) -> None:
        self.cache.evict(external_id)
