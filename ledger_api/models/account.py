"""
Account model - one entry in the ledger.

Each account has:
  - An integer id, assigned by the repository on insert and never changed
  - A first and last name
  - A unique account number, distinct from the id; it is the public routing
    key used by login and transfers, and the subject of issued credentials
  - An Argon2 hash of the owner's password (never serialized)
  - A balance in the smallest currency unit, starting at 0
  - A UTC creation timestamp

A CHECK constraint at the database level keeps the balance non-negative.
"""

import logging
import random
from datetime import datetime, timezone

from passlib.exc import PasswordSizeError
from sqlalchemy import BigInteger, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_api.database import Base
from ledger_api.exceptions import CreationError, InfrastructureError
from ledger_api.security import hash_password, verify_password

logger = logging.getLogger(__name__)

ACCOUNT_NUMBER_MIN = 100_000
ACCOUNT_NUMBER_MAX = 999_999


def generate_account_number() -> int:
    """Pick a pseudorandom six-digit account number."""
    return random.randint(ACCOUNT_NUMBER_MIN, ACCOUNT_NUMBER_MAX)


class Account(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_non_negative_balance"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)

    number: Mapped[int] = mapped_column(
        BigInteger,
        unique=True,
        nullable=False,
        index=True,
    )

    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @classmethod
    def create(cls, first_name: str, last_name: str, password: str) -> "Account":
        """
        Build a new, not-yet-persisted account.

        The id stays unset until the repository stores the account.

        Raises:
            CreationError: If the password can't be hashed.
        """
        try:
            hashed = hash_password(password)
        except (PasswordSizeError, ValueError, TypeError) as exc:
            logger.exception("Password hashing failed")
            raise CreationError("could not create account") from exc

        return cls(
            first_name=first_name,
            last_name=last_name,
            number=generate_account_number(),
            hashed_password=hashed,
            balance=0,
            created_at=datetime.now(timezone.utc),
        )

    def verify_password(self, password: str) -> bool:
        """
        Check ``password`` against the stored hash in constant time.

        A mismatch is simply False; only a broken stored hash is an error.
        """
        try:
            return verify_password(password, self.hashed_password)
        except (ValueError, TypeError) as exc:
            logger.exception("Stored password hash for account id=%s is unusable", self.id)
            raise InfrastructureError("could not verify password") from exc

    def __repr__(self) -> str:
        return f"<Account id={self.id} number={self.number}>"
