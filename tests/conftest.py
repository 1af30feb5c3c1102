"""
Test fixtures for the banking core test suite.

This module provides shared fixtures used across all test files:

  - config: Settings built from defaults only (no .env file)
  - context: A fresh OperatingContext with both flags off
  - processor / manager: Core objects wired to config and context
  - compliance, audit, auth, notification, data_service: Collaborator
    doubles built with create_autospec, so a call that does not match the
    interface signature fails the test
  - completes_in_other_thread: Runs a callable on a second thread, used
    from inside collaborator side effects to show the caller released its lock

Key design decisions:
  - Every test gets its own processor, manager and context. Nothing is
    shared between tests except the process-wide id sequences, so tests
    never assert on absolute ids or account numbers.
  - Collaborator doubles return the "happy" answer by default
    (LOW_RISK, True); individual tests override return values or set a
    side_effect to simulate failures.
"""

import threading
from unittest.mock import create_autospec

import pytest

from banking_core.config import Settings
from banking_core.context import OperatingContext
from banking_core.models.transaction import TransactionStatus, TransactionType
from banking_core.services.account_manager import AccountManager
from banking_core.services.external import (
    AuditLoggingService,
    AuthenticationService,
    ComplianceCheckService,
    ComplianceLevel,
    ExternalDataService,
    NotificationService,
)
from banking_core.services.transaction_processor import TransactionProcessor


@pytest.fixture
def config():
    """Default limits, ignoring any .env file in the working directory."""
    return Settings(_env_file=None)


@pytest.fixture
def context():
    return OperatingContext()


@pytest.fixture
def processor(config, context):
    return TransactionProcessor(context=context, config=config)


@pytest.fixture
def manager(config, context):
    return AccountManager(context=context, config=config)


@pytest.fixture
def compliance():
    service = create_autospec(ComplianceCheckService, instance=True)
    service.check_compliance_level.return_value = ComplianceLevel.LOW_RISK
    return service


@pytest.fixture
def audit():
    service = create_autospec(AuditLoggingService, instance=True)
    service.log_transaction.return_value = True
    service.log_account_event.return_value = True
    return service


@pytest.fixture
def auth():
    return create_autospec(AuthenticationService, instance=True)


@pytest.fixture
def notification():
    service = create_autospec(NotificationService, instance=True)
    service.send_email_notification.return_value = True
    return service


@pytest.fixture
def data_service():
    service = create_autospec(ExternalDataService, instance=True)
    service.get_linked_accounts.return_value = []
    service.get_identity_verification_status.return_value = "VERIFIED"
    service.get_credit_score.return_value = "750"
    return service


@pytest.fixture
def fill_daily_volume():
    """Deposit 1,000,000.00 `times` times, pushing daily volume up in big steps."""
    def _fill(processor, times=5):
        for _ in range(times):
            status = processor.process_transaction(TransactionType.DEPOSIT, "1000000.00", "FUNDING")
            assert status == TransactionStatus.COMPLETED

    return _fill


@pytest.fixture
def completes_in_other_thread():
    """
    Run `fn` on a second thread and report whether it finished in time.

    A processor or manager method that takes the instance lock only finishes
    here if the calling thread is not holding that lock.
    """
    def _run(fn, timeout=2.0):
        finished = threading.Event()

        def target():
            fn()
            finished.set()

        threading.Thread(target=target, daemon=True).start()
        return finished.wait(timeout)

    return _run
