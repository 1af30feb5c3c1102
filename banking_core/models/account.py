"""
Account model: a bank account held by the AccountManager.

Each account has:
  - A unique account number (prefix + counter, e.g. "ACC500001")
  - A type: checking, savings, investment or business
  - A lifecycle status (see AccountStatus)
  - A balance and credit limit as Decimals
  - A stored integer risk score, a verified flag and a fraud-alert flag

Lifecycle:
  New accounts start in PENDING_VERIFICATION. From there they are
  verified, activated, suspended, frozen or closed. CLOSED is terminal:
  the only transition out of it that succeeds is CLOSED -> CLOSED.
  Accounts are never deleted; closing is a status, not a removal.

The model is deliberately mutable. AccountManager.get_account() hands out
the live object, so the embedding application can adjust a balance or
raise a fraud alert directly.
"""

import enum
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class AccountType(str, enum.Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    BUSINESS = "business"


class AccountStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    FROZEN = "frozen"
    CLOSED = "closed"
    PENDING_VERIFICATION = "pending_verification"


class Account(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    account_number: str
    account_type: AccountType
    status: AccountStatus = AccountStatus.PENDING_VERIFICATION
    balance: Decimal = Decimal("0")
    credit_limit: Decimal = Decimal("0")
    risk_score: int = 0
    is_verified: bool = False
    has_fraud_alert: bool = False


class RiskAssessment(BaseModel):
    """
    Result of a risk evaluation.

    `found` tells an unknown account apart from a closed one. For unknown
    accounts, status is CLOSED and risk_score is 0, matching what
    AccountManager.evaluate_account_risk() returns.
    """
    model_config = ConfigDict(frozen=True)

    found: bool
    status: AccountStatus
    risk_score: int = 0
