"""
External service interfaces: the collaborators the core calls but never implements.

The processor and the manager depend on these capabilities only through
the narrow methods declared here. Implementations live in the embedding
application (or are test doubles); the core holds zero or one of each.

Used by the core:
  - ComplianceCheckService : TransactionProcessor.process_transaction
  - AuditLoggingService    : every recorded transaction
  - ExternalDataService    : risk evaluation and verification lookups
  - NotificationService    : the "Account Verified" email
  - AuthenticationService  : held by AccountManager for the embedding
                              application; the core never consults it

RateLimitingService completes the set of capability contracts and is not
wired into the core.

Collaborator results are taken at face value: nothing is retried. An
implementation that cannot answer raises banking_core.exceptions.ServiceError.
"""

import enum
from abc import ABC, abstractmethod


class ComplianceLevel(str, enum.Enum):
    LOW_RISK = "low_risk"
    MEDIUM_RISK = "medium_risk"
    HIGH_RISK = "high_risk"
    BLOCKED = "blocked"


class VerificationResult(str, enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"


class AuthenticationService(ABC):

    @abstractmethod
    def validate_credentials(self, username: str, password: str) -> bool:
        ...

    @abstractmethod
    def enable_multi_factor(self, account_number: str) -> bool:
        ...

    @abstractmethod
    def verify_multi_factor_token(self, account_number: str, token: str) -> VerificationResult:
        ...

    @abstractmethod
    def lock_account(self, account_number: str) -> bool:
        ...


class ComplianceCheckService(ABC):

    @abstractmethod
    def check_compliance_level(self, account_number: str) -> ComplianceLevel:
        """Return the compliance rating for an account."""

    @abstractmethod
    def report_suspicious_activity(self, account_number: str, description: str) -> bool:
        ...

    @abstractmethod
    def get_blacklist(self) -> list[str]:
        ...

    @abstractmethod
    def is_account_blacklisted(self, account_number: str) -> bool:
        ...


class AuditLoggingService(ABC):

    @abstractmethod
    def log_transaction(self, account_number: str, transaction_details: str, timestamp: str) -> bool:
        """
        Record a processed transaction. False means the entry was not stored.

        transaction_details is the amount as a plain decimal string, exactly
        as it was given (Decimal("250.50") -> "250.50"). timestamp is the
        transaction's created_at in ISO-8601 with a UTC offset.
        """

    @abstractmethod
    def log_account_event(self, account_number: str, event_type: str, event_details: str) -> bool:
        ...

    @abstractmethod
    def get_audit_trail(self, account_number: str) -> list[str]:
        ...

    @abstractmethod
    def archive_audit_logs(self, archive_date: str) -> bool:
        ...


class NotificationService(ABC):

    @abstractmethod
    def send_email_notification(self, email: str, subject: str, body: str) -> bool:
        ...

    @abstractmethod
    def send_sms_notification(self, phone_number: str, message: str) -> bool:
        ...

    @abstractmethod
    def send_push_notification(self, device_token: str, title: str, message: str) -> bool:
        ...

    @abstractmethod
    def subscribe_to_notifications(self, account_number: str, notification_type: str) -> bool:
        ...


class ExternalDataService(ABC):

    @abstractmethod
    def get_credit_score(self, account_number: str) -> str:
        ...

    @abstractmethod
    def get_identity_verification_status(self, account_number: str) -> str:
        ...

    @abstractmethod
    def validate_bank_account(self, bank_account: str, routing_number: str) -> bool:
        ...

    @abstractmethod
    def get_linked_accounts(self, primary_account: str) -> list[str]:
        ...


class RateLimitingService(ABC):

    @abstractmethod
    def check_rate_limit(self, account_number: str) -> bool:
        ...

    @abstractmethod
    def increment_rate_counter(self, account_number: str) -> bool:
        ...

    @abstractmethod
    def reset_rate_limits(self, account_number: str) -> None:
        ...

    @abstractmethod
    def get_remaining_requests(self, account_number: str) -> int:
        ...
