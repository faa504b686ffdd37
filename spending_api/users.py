# spending_api/users.py
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import AlreadyExistsError, ValidationError
from .models import UserAccount
from .schemas import UserRecord

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(self, db: Session):
        self.db = db

    def get_by_external_id(self, external_id: str) -> Optional[UserRecord]:
        row = self.db.execute(
            select(UserAccount).where(UserAccount.firebase_uid == external_id)
        ).scalar_one_or_none()
        return UserRecord.model_validate(row) if row else None

    def register(self, external_id: str, email: str) -> UserRecord:
        """
        Creates the account for an external identity.

        Email format and email uniqueness are intentionally not checked.

        Raises:
            ValidationError: If either value is blank
            AlreadyExistsError: If the identity is already registered
        """
        if not external_id or not external_id.strip():
            raise ValidationError("User id is required")
        if not email or not email.strip():
            raise ValidationError("Email is required")

        if self.get_by_external_id(external_id) is not None:
            raise AlreadyExistsError("User already exists")

        user = UserAccount(firebase_uid=external_id, email=email)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Another request registered the same uid between our check and insert
            self.db.rollback()
            raise AlreadyExistsError("User already exists")

        self.db.refresh(user)
        logger.info("Registered user %s (account %s)", external_id, user.id)
        return UserRecord.model_validate(user)
