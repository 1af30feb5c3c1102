"""
Exception classes for the banking core.

Business outcomes never raise: a rejected transaction is a REJECTED status,
an unknown account is False, None or a sentinel. Exceptions are reserved for
collaborators. A compliance, audit, notification or data service
implementation signals an outage by raising ServiceError, and the core
decides per call site whether that failure matters:

  - Best-effort calls (audit logging, verification email, external data
    lookups) log the failure and carry on.
  - The compliance check fails closed: the transaction is REJECTED and the
    failure logged, because nothing can be approved without a compliance
    answer.

Exception hierarchy:
    BankingCoreError (base)
    └── ServiceError: a collaborator failed to answer
"""


class BankingCoreError(Exception):
    """Base exception for all banking core errors."""

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


class ServiceError(BankingCoreError):
    """
    Raised by a collaborator implementation when it cannot answer.

    Attributes:
        service: Name of the failing collaborator (e.g. "audit").
        operation: The method that failed (e.g. "log_transaction").
    """

    def __init__(self, service: str, operation: str, detail: str = "service unavailable"):
        self.service = service
        self.operation = operation
        super().__init__(f"{service}.{operation} failed: {detail}")
