"""
Domain models package.

All models are imported here so other modules can import from
banking_core.models directly.
"""

from banking_core.models.account import Account, AccountStatus, AccountType, RiskAssessment  # noqa: F401
from banking_core.models.transaction import Transaction, TransactionStatus, TransactionType  # noqa: F401
