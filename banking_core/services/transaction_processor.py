"""
Transaction processor: validation, classification and execution of transactions.

THIS IS WHERE EVERY MONEY-MOVEMENT DECISION IS MADE. It handles:
  - Amount validation (global bounds plus per-type ceilings)
  - Transfer decisions (same-account, urgent-transfer and system-lock rules)
  - Compliance screening through an injected ComplianceCheckService
  - The transaction history and the daily count/volume limits
  - Audit logging through an injected AuditLoggingService

Outcomes, not exceptions:
  Every operation returns a TransactionStatus (or a bool). Invalid amounts,
  blocked accounts and exhausted limits are REJECTED; a transfer to the same
  account with no amount, or an unknown transaction type, is CANCELLED.
  Nothing here raises for a business outcome.

Daily limits:
  The daily transaction count and daily volume are not tied to the clock.
  They grow as transactions are recorded and only go back to zero when the
  embedding application calls reset_daily_limits(). The history is never
  cleared.

Bookkeeping order in process_transaction():
  1. validate_transaction()          -> REJECTED on failure
  2. compliance check (if injected)  -> REJECTED for BLOCKED, or HIGH_RISK
                                        above HIGH_RISK_COMPLIANCE_LIMIT
  3. dispatch by type
  4. record + count, only for PENDING/APPROVED/COMPLETED
  5. audit the recorded transaction, after the lock is released

  A compliance collaborator that raises ServiceError gets the transaction
  REJECTED, so process_transaction() itself never raises.

Locking:
  Each processor owns one reentrant lock. Every public method that reads
  and writes the counters or the history takes it, so a single instance can
  be driven from several threads. Collaborators are never called while it
  is held. The lock is reentrant because process_transaction() calls
  execute_transfer().
"""

import itertools
import logging
import threading
from decimal import Decimal

from banking_core.config import Settings, settings as default_settings
from banking_core.context import OperatingContext
from banking_core.exceptions import ServiceError
from banking_core.models.transaction import Transaction, TransactionStatus, TransactionType
from banking_core.services.external import AuditLoggingService, ComplianceCheckService, ComplianceLevel

logger = logging.getLogger(__name__)

# Transaction ids are unique for the lifetime of the process, across
# every processor instance.
_transaction_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def _next_transaction_id(start: int) -> int:
    with _sequence_lock:
        return start + next(_transaction_sequence)


def to_decimal(amount) -> Decimal:
    """
    Normalize a caller-supplied amount to Decimal.

    Floats go through str() first so 50000.01 becomes Decimal("50000.01")
    rather than its binary approximation.
    NaN and infinite values come back as-is; callers check is_finite()
    before comparing, since a NaN comparison raises InvalidOperation.
    """
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


class TransactionProcessor:
    """
    Validates and executes transactions against running daily limits.

    Args:
        compliance_service: Optional compliance collaborator.
        audit_service: Optional audit collaborator.
        context: Operating flags; pass the same instance to several
                 processors to share a system lock between them.
        config: Limits and thresholds; defaults to the settings singleton.
    """

    def __init__(
        self,
        compliance_service: ComplianceCheckService | None = None,
        audit_service: AuditLoggingService | None = None,
        context: OperatingContext | None = None,
        config: Settings | None = None,
    ):
        self._settings = config or default_settings
        self.context = context or OperatingContext.from_settings(self._settings)
        self.compliance_service = compliance_service
        self.audit_service = audit_service

        self._lock = threading.RLock()
        self._history: list[Transaction] = []
        self._daily_volume = Decimal("0")
        self._daily_transaction_count = 0
        self._total_processed = 0
        self._total_deposit_volume = Decimal("0")

    # ------------------------------------------------------------------
    # Collaborator injection
    # ------------------------------------------------------------------

    def set_compliance_service(self, service: ComplianceCheckService | None) -> None:
        self.compliance_service = service

    def set_audit_service(self, service: AuditLoggingService | None) -> None:
        self.audit_service = service

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def validate_transaction(self, amount, txn_type: TransactionType) -> bool:
        """
        Check an amount against the global bounds and the per-type ceilings.

        Rules are evaluated in order and the first match wins, so the
        global bounds take precedence over the type-specific ones:
          0. amount is NaN or infinite                 -> False
          1. amount < MIN_TRANSACTION_AMOUNT            -> False
          2. amount > MAX_TRANSACTION_AMOUNT            -> False
          3. WITHDRAWAL and amount > MAX_WITHDRAWAL     -> False
          4. REFUND and amount > MAX_REFUND             -> False
          otherwise                                     -> True
        """
        amount = to_decimal(amount)
        cfg = self._settings

        if not amount.is_finite():
            return False
        elif amount < cfg.MIN_TRANSACTION_AMOUNT:
            return False
        elif amount > cfg.MAX_TRANSACTION_AMOUNT:
            return False
        elif txn_type == TransactionType.WITHDRAWAL and amount > cfg.MAX_WITHDRAWAL_AMOUNT:
            return False
        elif txn_type == TransactionType.REFUND and amount > cfg.MAX_REFUND_AMOUNT:
            return False
        else:
            return True

    def execute_transfer(
        self,
        amount,
        source: str,
        destination: str,
        is_urgent: bool = False,
    ) -> TransactionStatus:
        """
        Decide the outcome of a transfer between two accounts.

        Each step short-circuits the rest:
          1. Missing source or destination          -> REJECTED
             NaN amount                             -> CANCELLED
          2. Same account: positive amount          -> REJECTED
                           zero or negative amount  -> CANCELLED
          3. Urgent and above the urgent threshold: daily count exhausted
             or daily volume would be exceeded      -> REJECTED
             (otherwise fall through to step 4)
          4. System locked: not urgent              -> PENDING
                            urgent                  -> APPROVED
          5. Final check on amount, count and volume:
             all within limits                      -> COMPLETED
             volume would be exceeded               -> APPROVED
             count exhausted                        -> PENDING
             non-positive amount                    -> CANCELLED

        This method only decides. The daily counters are updated by
        process_transaction(), never here.
        """
        amount = to_decimal(amount)
        cfg = self._settings

        if not source or not destination:
            return TransactionStatus.REJECTED

        # A NaN amount is never positive
        if amount.is_nan():
            return TransactionStatus.CANCELLED

        if source == destination:
            if amount > 0:
                return TransactionStatus.REJECTED
            else:
                return TransactionStatus.CANCELLED

        with self._lock:
            count = self._daily_transaction_count
            volume = self._daily_volume

        if is_urgent and amount > cfg.URGENT_TRANSFER_THRESHOLD:
            if count >= cfg.MAX_DAILY_TRANSACTIONS:
                return TransactionStatus.REJECTED
            elif volume + amount > cfg.MAX_DAILY_VOLUME:
                return TransactionStatus.REJECTED

        # Urgent transfers get through the lock, but only as far as APPROVED
        if self.context.system_locked and not is_urgent:
            return TransactionStatus.PENDING
        elif self.context.system_locked and is_urgent:
            return TransactionStatus.APPROVED

        if (
            amount > 0
            and count < cfg.MAX_DAILY_TRANSACTIONS
            and volume + amount <= cfg.MAX_DAILY_VOLUME
        ):
            return TransactionStatus.COMPLETED
        elif amount > 0 and count < cfg.MAX_DAILY_TRANSACTIONS:
            return TransactionStatus.APPROVED
        elif amount > 0:
            return TransactionStatus.PENDING
        else:
            return TransactionStatus.CANCELLED

    def process_transaction(
        self,
        txn_type: TransactionType,
        amount,
        source_account: str,
        dest_account: str = "",
    ) -> TransactionStatus:
        """
        Validate, screen, execute and record a transaction.

        Args:
            txn_type: The kind of transaction. Anything that is not a
                      TransactionType member resolves to CANCELLED.
            amount: The amount; Decimal, int, float or numeric string.
            source_account: The account being charged (or credited, for
                            deposits). Screened by compliance.
            dest_account: Destination account; only used by transfers.

        Returns:
            The resulting TransactionStatus. PENDING, APPROVED and
            COMPLETED outcomes are recorded in history, audited and
            counted against the daily limits.
        """
        amount = to_decimal(amount)
        cfg = self._settings

        if not self.validate_transaction(amount, txn_type):
            logger.info(
                "Transaction rejected by validation",
                extra={"txn_type": _type_name(txn_type), "amount": str(amount)},
            )
            return TransactionStatus.REJECTED

        if self.compliance_service is not None:
            try:
                level = self.compliance_service.check_compliance_level(source_account)
            except ServiceError as exc:
                # No compliance answer, no approval
                logger.warning(
                    "Transaction rejected: compliance check failed: %s",
                    exc.detail,
                    extra={"account_number": source_account},
                )
                return TransactionStatus.REJECTED

            if level == ComplianceLevel.BLOCKED:
                logger.info(
                    "Transaction rejected: account blocked by compliance",
                    extra={"account_number": source_account},
                )
                return TransactionStatus.REJECTED

            if level == ComplianceLevel.HIGH_RISK and amount > cfg.HIGH_RISK_COMPLIANCE_LIMIT:
                logger.info(
                    "Transaction rejected: high-risk account over compliance limit",
                    extra={"account_number": source_account, "amount": str(amount)},
                )
                return TransactionStatus.REJECTED

        transaction = None
        with self._lock:
            status = self._dispatch(txn_type, amount, source_account, dest_account)

            if status.is_logged:
                transaction = Transaction(
                    id=_next_transaction_id(cfg.TRANSACTION_ID_START),
                    type=txn_type,
                    amount=amount,
                    source_account=source_account,
                    dest_account=dest_account,
                    status=status,
                )
                self._record_transaction(transaction)
                self._daily_transaction_count += 1
                self._total_processed += 1

        # The audit collaborator is called outside the lock so a slow
        # audit service does not hold up other callers.
        if transaction is not None:
            self._audit(transaction)

        return status

    def _dispatch(
        self,
        txn_type: TransactionType,
        amount: Decimal,
        source_account: str,
        dest_account: str,
    ) -> TransactionStatus:
        """Apply the type-specific rules. Caller holds the lock."""
        cfg = self._settings
        under_daily_limit = self._daily_transaction_count < cfg.MAX_DAILY_TRANSACTIONS
        status = TransactionStatus.PENDING

        if txn_type == TransactionType.TRANSFER:
            status = self.execute_transfer(amount, source_account, dest_account, is_urgent=False)
        elif txn_type == TransactionType.DEPOSIT:
            if amount > 0 and under_daily_limit:
                status = TransactionStatus.COMPLETED
                self._daily_volume += amount
                self._total_deposit_volume += amount
            else:
                status = TransactionStatus.REJECTED
        elif txn_type == TransactionType.WITHDRAWAL:
            # validate_transaction() already caps withdrawals, so the final
            # PENDING branch cannot be reached through process_transaction()
            if amount > 0 and amount <= cfg.MAX_WITHDRAWAL_AMOUNT and under_daily_limit:
                status = TransactionStatus.COMPLETED
                self._daily_volume += amount
            elif not under_daily_limit:
                status = TransactionStatus.REJECTED
            else:
                status = TransactionStatus.PENDING
        elif txn_type == TransactionType.REFUND:
            # Same as withdrawals: the PENDING branch is guarded by validation
            if amount > 0 and amount <= cfg.MAX_REFUND_AMOUNT:
                status = TransactionStatus.COMPLETED
            elif amount > cfg.MAX_REFUND_AMOUNT:
                status = TransactionStatus.PENDING
        else:
            status = TransactionStatus.CANCELLED

        return status

    def _record_transaction(self, transaction: Transaction) -> None:
        """Append to history. Caller holds the lock."""
        self._history.append(transaction)
        logger.info(
            "Transaction recorded",
            extra={
                "transaction_id": transaction.id,
                "txn_type": transaction.type.value,
                "status": transaction.status.value,
                "amount": str(transaction.amount),
            },
        )

    def _audit(self, transaction: Transaction) -> None:
        """Report a recorded transaction to the audit collaborator. Caller must not hold the lock."""
        audit_service = self.audit_service
        if audit_service is None:
            return

        # Both audit calls are best-effort: a False return or a service
        # outage never changes the transaction outcome.
        try:
            stored = audit_service.log_transaction(
                transaction.source_account,
                str(transaction.amount),
                transaction.created_at.isoformat(),
            )
            if not stored:
                logger.warning(
                    "Audit service did not store transaction",
                    extra={"transaction_id": transaction.id},
                )
        except ServiceError as exc:
            logger.warning("Audit log_transaction failed: %s", exc.detail)

        try:
            audit_service.log_account_event(
                transaction.source_account,
                "TRANSACTION_PROCESSED",
                f"Transaction: {transaction.id}",
            )
        except ServiceError as exc:
            logger.warning("Audit log_account_event failed: %s", exc.detail)

    # ------------------------------------------------------------------
    # Daily limits and accessors
    # ------------------------------------------------------------------

    def reset_daily_limits(self) -> bool:
        """Zero the daily count and volume. History is kept. Always succeeds."""
        with self._lock:
            self._daily_volume = Decimal("0")
            self._daily_transaction_count = 0
        logger.debug("Daily limits reset")
        return True

    def get_daily_volume(self) -> Decimal:
        return self._daily_volume

    def get_transaction_count(self) -> int:
        return self._daily_transaction_count

    def get_total_processed(self) -> int:
        """Recorded transactions since construction; not affected by resets."""
        return self._total_processed

    def get_total_deposit_volume(self) -> Decimal:
        """Sum of completed deposits since construction; not affected by resets."""
        return self._total_deposit_volume

    def get_transaction_history(self) -> tuple[Transaction, ...]:
        """Snapshot of every recorded transaction, oldest first."""
        with self._lock:
            return tuple(self._history)


def _type_name(txn_type) -> str:
    return txn_type.value if isinstance(txn_type, TransactionType) else str(txn_type)
