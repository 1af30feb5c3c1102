"""
banking_core: in-memory transaction processing and account management.

Typical use:

    from banking_core import AccountManager, TransactionProcessor, TransactionType

    processor = TransactionProcessor()
    processor.process_transaction(TransactionType.DEPOSIT, "1000.00", "ACC500001")
"""

from banking_core.context import OperatingContext  # noqa: F401
from banking_core.models import (  # noqa: F401
    Account,
    AccountStatus,
    AccountType,
    RiskAssessment,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from banking_core.services import AccountManager, TransactionProcessor  # noqa: F401

__version__ = "0.1.0"
