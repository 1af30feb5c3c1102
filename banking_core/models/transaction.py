"""
Transaction model: the record of a processed financial transaction.

A Transaction is created by the TransactionProcessor only when processing
ends in a logged status (PENDING, APPROVED or COMPLETED). Rejected and
cancelled attempts leave no record. Once appended to the processor's
history a record is never changed or deleted, so the model is frozen.

Key fields:
  - id: process-lifetime unique, monotonically increasing integer
  - type: DEPOSIT, WITHDRAWAL, TRANSFER or REFUND
  - amount: Decimal, never float
  - source_account / dest_account: account numbers; dest_account is ""
    for transactions that only touch one account
  - status: the outcome returned to the caller
"""

import enum
from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class TransactionType(str, enum.Enum):
    """Kind of money movement requested by the caller."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"
    REFUND = "refund"


class TransactionStatus(str, enum.Enum):
    """
    Outcome of processing a transaction.

    REJECTED and CANCELLED are terminal and never recorded. The other three
    are recorded in history and counted against the daily limits.
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_logged(self) -> bool:
        return self not in (TransactionStatus.REJECTED, TransactionStatus.CANCELLED)


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    type: TransactionType
    amount: Decimal
    source_account: str
    dest_account: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: TransactionStatus
