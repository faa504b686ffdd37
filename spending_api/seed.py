# spending_api/seed.py
import argparse
import logging
import random
from decimal import Decimal

from faker import Faker

from .database import Base, SessionLocal, engine
from .insights import InsightsCache
from .service import SpendingService
from .transactions import TransactionStore
from .users import UserStore
from .validation import NewTransaction

logger = logging.getLogger(__name__)

CATEGORIES = ["Food", "Groceries", "Transport", "Rent", "Utilities", "Entertainment", "Health", "Shopping"]


def random_transaction(fake: Faker) -> NewTransaction:
    return NewTransaction(
        amount=Decimal(f"{random.uniform(5.0, 500.0):.2f}"),  # nosec B311
        category=random.choice(CATEGORIES),  # nosec B311
        merchant=fake.company(),
        transaction_date=fake.date_between(start_date="-1y", end_date="today"),
    )


def seed_transactions(service: SpendingService, uid: str, email: str, rows: int, fake: Faker) -> int:
    """
    Registers the user if needed and records `rows` random past transactions.

    Returns:
        int: Number of transactions created
    """
    if service.users.get_by_external_id(uid) is None:
        service.register_user(uid, email)

    for _ in range(rows):
        service.create_transaction(uid, random_transaction(fake))
    return rows


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate demo spending for a Firebase user.")
    parser.add_argument("--uid", required=True, help="Firebase uid to seed")
    parser.add_argument("--email", default="demo@example.com", help="Email used if the user must be registered")
    parser.add_argument("--rows", type=int, default=50, help="Number of transactions to generate")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        service = SpendingService(TransactionStore(db), UserStore(db), InsightsCache())
        created = seed_transactions(service, args.uid, args.email, args.rows, Faker())
    finally:
        db.close()
    logger.info("Seeded %s transactions for %s", created, args.uid)


if __name__ == "__main__":
    main()
