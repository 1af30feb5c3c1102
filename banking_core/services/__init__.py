"""
Service layer: the transaction processor, the account manager and the
interfaces of the external collaborators they call.
"""

from banking_core.services.account_manager import AccountManager  # noqa: F401
from banking_core.services.transaction_processor import TransactionProcessor  # noqa: F401
