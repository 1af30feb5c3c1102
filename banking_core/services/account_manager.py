"""
Account manager: account creation, lifecycle and risk scoring.

This module handles:
  - Account creation (with unique account number generation)
  - Status transitions: activate, suspend, deactivate, verify, update
  - Risk evaluation from transaction telemetry and verification/fraud flags
  - Lookups by account number

Status lifecycle:
  - New accounts start in PENDING_VERIFICATION.
  - verify_account(True) or activate_account() (once verified) -> ACTIVE.
  - suspend_account() or a high risk score -> SUSPENDED.
  - A high risk score under compliance audit mode -> FROZEN.
  - deactivate_account() on an account with no positive balance -> CLOSED.

  CLOSED is terminal: every transition out of it fails, and only
  CLOSED -> CLOSED through update_account_status() succeeds.

Outcomes, not exceptions:
  Unknown accounts and disallowed transitions return False (or None, or
  the Decimal("-1") balance sentinel). evaluate_account_risk() returns
  CLOSED for an unknown account; use assess_account_risk() when the
  caller needs to tell "unknown" from "closed".

Suspended counter:
  The counter is incremented every time an account is suspended, including
  when it was already SUSPENDED. It is only decremented by a
  SUSPENDED -> ACTIVE update. It is therefore a count of suspension events
  more than a count of currently suspended accounts.

Locking:
  One reentrant lock per manager guards the account map and the counters.
  The notification and external data collaborators are called after it is
  released.
"""

import itertools
import logging
import threading
from decimal import Decimal

from banking_core.config import Settings, settings as default_settings
from banking_core.context import OperatingContext
from banking_core.exceptions import ServiceError
from banking_core.models.account import Account, AccountStatus, AccountType, RiskAssessment
from banking_core.services.external import (
    AuthenticationService,
    ExternalDataService,
    NotificationService,
)
from banking_core.services.transaction_processor import to_decimal

logger = logging.getLogger(__name__)

# Balance returned by get_account_balance() for unknown accounts
UNKNOWN_ACCOUNT_BALANCE = Decimal("-1")

# Account numbers are unique for the lifetime of the process, across
# every manager instance.
_account_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def _generate_account_number(prefix: str, start: int) -> str:
    """
    Generate the next account number: a fixed prefix plus a counter.

    Numbers only need to be unique, not unguessable, so a monotonically
    increasing suffix is enough.
    """
    with _sequence_lock:
        return f"{prefix}{start + next(_account_sequence)}"


def calculate_risk_score(account: Account, transaction_count: int, volume_last_day) -> int:
    """
    Additive risk score from telemetry and the account's flags.

    Transaction count:   > 100 -> +30,  > 50 -> +15,  > 20 -> +5
    Volume last day:     > 1,000,000 -> +40,  > 500,000 -> +20,  > 100,000 -> +10
    Flags:               unverified with fraud alert -> +35,
                         unverified -> +20,  fraud alert -> +25

    A NaN volume adds nothing.
    """
    volume = to_decimal(volume_last_day)
    if volume.is_nan():
        volume = Decimal("0")
    score = 0

    if transaction_count > 100:
        score += 30
    elif transaction_count > 50:
        score += 15
    elif transaction_count > 20:
        score += 5

    if volume > 1_000_000:
        score += 40
    elif volume > 500_000:
        score += 20
    elif volume > 100_000:
        score += 10

    if not account.is_verified and account.has_fraud_alert:
        score += 35
    elif not account.is_verified:
        score += 20
    elif account.has_fraud_alert:
        score += 25

    return score


class AccountManager:
    """
    Owns a collection of accounts and manages their lifecycle.

    Args:
        auth_service: Optional authentication collaborator (held, not used
                      by the core).
        notification_service: Optional notification collaborator.
        data_service: Optional external data collaborator.
        context: Operating flags; compliance_audit_mode decides between
                 freezing and suspending high-risk accounts.
        config: Limits and thresholds; defaults to the settings singleton.
    """

    def __init__(
        self,
        auth_service: AuthenticationService | None = None,
        notification_service: NotificationService | None = None,
        data_service: ExternalDataService | None = None,
        context: OperatingContext | None = None,
        config: Settings | None = None,
    ):
        self._settings = config or default_settings
        self.context = context or OperatingContext.from_settings(self._settings)
        self.auth_service = auth_service
        self.notification_service = notification_service
        self.data_service = data_service

        self._lock = threading.RLock()
        self._accounts: dict[str, Account] = {}
        self._suspended_account_count = 0
        self._total_managed_balance = Decimal("0")
        self._total_accounts_created = 0

    # ------------------------------------------------------------------
    # Collaborator injection
    # ------------------------------------------------------------------

    def set_authentication_service(self, service: AuthenticationService | None) -> None:
        self.auth_service = service

    def set_notification_service(self, service: NotificationService | None) -> None:
        self.notification_service = service

    def set_external_data_service(self, service: ExternalDataService | None) -> None:
        self.data_service = service

    # ------------------------------------------------------------------
    # Creation and lifecycle
    # ------------------------------------------------------------------

    def create_account(self, account_type: AccountType, initial_balance) -> str:
        """
        Create a new account in PENDING_VERIFICATION.

        Returns:
            The new account number, or "" if the initial balance is NaN,
            infinite or below MIN_ACCOUNT_BALANCE, or the manager already
            holds MAX_ACCOUNTS_PER_HOLDER accounts.
        """
        initial_balance = to_decimal(initial_balance)
        cfg = self._settings

        if not initial_balance.is_finite():
            return ""
        elif initial_balance < cfg.MIN_ACCOUNT_BALANCE:
            return ""

        with self._lock:
            if len(self._accounts) >= cfg.MAX_ACCOUNTS_PER_HOLDER:
                logger.info("Account creation refused: holder at account limit")
                return ""

            account_number = _generate_account_number(
                cfg.ACCOUNT_NUMBER_PREFIX, cfg.ACCOUNT_NUMBER_START
            )
            self._accounts[account_number] = Account(
                account_number=account_number,
                account_type=account_type,
                balance=initial_balance,
            )
            self._total_managed_balance += initial_balance
            self._total_accounts_created += 1

        logger.info(
            "Account created",
            extra={"account_number": account_number, "account_type": AccountType(account_type).value},
        )
        return account_number

    def activate_account(self, account_number: str) -> bool:
        """
        Move an account to ACTIVE.

        Fails for unknown accounts, unverified PENDING_VERIFICATION
        accounts, and CLOSED or FROZEN accounts. An account that is already
        ACTIVE (or SUSPENDED) is activated again and returns True.
        """
        with self._lock:
            account = self._accounts.get(account_number)
            if account is None:
                return False

            if account.status == AccountStatus.PENDING_VERIFICATION:
                if not account.is_verified:
                    return False

            if account.status in (AccountStatus.CLOSED, AccountStatus.FROZEN):
                return False

            account.status = AccountStatus.ACTIVE

        logger.info("Account activated", extra={"account_number": account_number})
        return True

    def suspend_account(self, account_number: str, reason: str) -> bool:
        """Suspend any account that is not CLOSED. Counts every suspension."""
        with self._lock:
            account = self._accounts.get(account_number)
            if account is None:
                return False

            if account.status == AccountStatus.CLOSED:
                return False

            account.status = AccountStatus.SUSPENDED
            self._suspended_account_count += 1

        logger.info(
            "Account suspended",
            extra={"account_number": account_number, "reason": reason},
        )
        return True

    def deactivate_account(self, account_number: str) -> bool:
        """Close an account. Only accounts with no positive balance can be closed."""
        with self._lock:
            account = self._accounts.get(account_number)
            if account is None:
                return False

            if account.status == AccountStatus.CLOSED:
                return False

            if account.balance > 0:
                return False

            account.status = AccountStatus.CLOSED

        logger.info("Account closed", extra={"account_number": account_number})
        return True

    def verify_account(self, account_number: str, verification_result: bool) -> bool:
        """
        Record the outcome of identity verification.

        The verified flag is always set to `verification_result`. Identity
        status and credit score are looked up on the data collaborator, and
        a successful verification triggers an email; both are best-effort.

        Returns:
            True only if verification succeeded and the account moved from
            PENDING_VERIFICATION to ACTIVE. A successful verification of an
            account in any other status still sets the flag but returns False.
        """
        with self._lock:
            account = self._accounts.get(account_number)
            if account is None:
                return False

            account.is_verified = verification_result
            activated = (
                verification_result and account.status == AccountStatus.PENDING_VERIFICATION
            )
            if activated:
                account.status = AccountStatus.ACTIVE

        # Collaborators are called after the lock is released; their
        # answers never change the outcome.
        data_service = self.data_service
        if data_service is not None:
            try:
                data_service.get_identity_verification_status(account_number)
                data_service.get_credit_score(account_number)
            except ServiceError as exc:
                logger.warning("External data lookup failed: %s", exc.detail)

        notification_service = self.notification_service
        if notification_service is not None and verification_result:
            try:
                notification_service.send_email_notification(
                    self._settings.VERIFICATION_EMAIL,
                    "Account Verified",
                    "Your account has been verified successfully.",
                )
            except ServiceError as exc:
                logger.warning("Verification email failed: %s", exc.detail)

        if activated:
            logger.info("Account verified and activated", extra={"account_number": account_number})
        return activated

    def update_account_status(self, account_number: str, new_status: AccountStatus) -> bool:
        """
        Apply a direct status change, subject to the transition rules.

        Rejected transitions:
          - out of CLOSED (CLOSED -> CLOSED is allowed)
          - FROZEN -> ACTIVE when unverified or under fraud alert
          - ACTIVE -> SUSPENDED when the stored risk score is below
            HIGH_RISK_THRESHOLD

        On success the suspended counter follows the transition: it drops
        for SUSPENDED -> ACTIVE and rises when entering SUSPENDED.
        """
        with self._lock:
            account = self._accounts.get(account_number)
            if account is None:
                return False

            current = account.status

            if current == AccountStatus.CLOSED and new_status != AccountStatus.CLOSED:
                return False
            elif current == AccountStatus.FROZEN and new_status == AccountStatus.ACTIVE:
                if not account.is_verified or account.has_fraud_alert:
                    return False
            elif (
                new_status == AccountStatus.SUSPENDED
                and account.risk_score < self._settings.HIGH_RISK_THRESHOLD
            ):
                if current == AccountStatus.ACTIVE:
                    return False

            if current == AccountStatus.SUSPENDED and new_status == AccountStatus.ACTIVE:
                self._suspended_account_count -= 1
            elif current != AccountStatus.SUSPENDED and new_status == AccountStatus.SUSPENDED:
                self._suspended_account_count += 1

            account.status = new_status

        logger.info(
            "Account status updated",
            extra={
                "account_number": account_number,
                "from_status": current.value,
                "to_status": AccountStatus(new_status).value,
            },
        )
        return True

    # ------------------------------------------------------------------
    # Risk
    # ------------------------------------------------------------------

    def assess_account_risk(
        self,
        account_number: str,
        transaction_count: int,
        volume_last_day,
    ) -> RiskAssessment:
        """
        Score an account and apply the resulting status.

        score >= HIGH_RISK_THRESHOLD, audit mode on   -> FROZEN (stored)
        score >= HIGH_RISK_THRESHOLD, audit mode off  -> SUSPENDED (stored,
                                                         counter incremented)
        score > 50                                    -> PENDING_VERIFICATION
        otherwise                                     -> ACTIVE

        The last two outcomes are recommendations only: the stored status
        is left as it was. The computed score is reported in the result and
        is not written to the account.

        A CLOSED account is scored and gets a verdict, but its stored
        status and the suspended counter are never changed.
        """
        with self._lock:
            account = self._accounts.get(account_number)
            if account is None:
                return RiskAssessment(found=False, status=AccountStatus.CLOSED)

            score = calculate_risk_score(account, transaction_count, volume_last_day)
            threshold = self._settings.HIGH_RISK_THRESHOLD

            # CLOSED is terminal: a closed account gets the verdict but keeps its status
            closed = account.status == AccountStatus.CLOSED

            if score >= threshold and self.context.compliance_audit_mode:
                if not closed:
                    account.status = AccountStatus.FROZEN
                status = AccountStatus.FROZEN
            elif score >= threshold:
                if not closed:
                    account.status = AccountStatus.SUSPENDED
                    self._suspended_account_count += 1
                status = AccountStatus.SUSPENDED
            elif score > 50:
                status = AccountStatus.PENDING_VERIFICATION
            else:
                status = AccountStatus.ACTIVE

        # Linked accounts do not feed the score; the lookup runs unlocked
        data_service = self.data_service
        if data_service is not None:
            try:
                data_service.get_linked_accounts(account_number)
            except ServiceError as exc:
                logger.warning("Linked accounts lookup failed: %s", exc.detail)

        logger.info(
            "Account risk evaluated",
            extra={"account_number": account_number, "risk_score": score, "status": status.value},
        )
        return RiskAssessment(found=True, status=status, risk_score=score)

    def evaluate_account_risk(
        self,
        account_number: str,
        transaction_count: int,
        volume_last_day,
    ) -> AccountStatus:
        """
        Status-only form of assess_account_risk().

        Returns CLOSED for an unknown account. That CLOSED means "not
        found", not that an account was closed.
        """
        return self.assess_account_risk(account_number, transaction_count, volume_last_day).status

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_account(self, account_number: str) -> Account | None:
        """The live Account object, or None if unknown."""
        return self._accounts.get(account_number)

    def get_account_balance(self, account_number: str) -> Decimal:
        """The account balance, or Decimal("-1") if unknown."""
        account = self._accounts.get(account_number)
        if account is None:
            return UNKNOWN_ACCOUNT_BALANCE
        return account.balance

    def list_accounts(self) -> list[Account]:
        with self._lock:
            return list(self._accounts.values())

    def get_suspended_account_count(self) -> int:
        return self._suspended_account_count

    def get_total_managed_balance(self) -> Decimal:
        """Sum of initial balances of every account created by this manager."""
        return self._total_managed_balance

    def get_total_accounts_created(self) -> int:
        return self._total_accounts_created
