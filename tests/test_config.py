"""
Tests for configuration, the operating context and logging setup.

These tests verify:
  - Settings defaults match the documented limits
  - Environment variables override defaults, with exact decimal parsing
  - OperatingContext picks its initial flags from settings
  - setup_logging emits JSON records with service metadata
"""

import json
import logging
from decimal import Decimal

import pytest

from banking_core.config import Settings
from banking_core.context import OperatingContext
from banking_core.models.transaction import TransactionStatus, TransactionType
from banking_core.observability import setup_logging
from banking_core.services.transaction_processor import TransactionProcessor


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSettings:

    def test_defaults(self, config):
        assert config.MIN_TRANSACTION_AMOUNT == Decimal("0.01")
        assert config.MAX_TRANSACTION_AMOUNT == Decimal("1000000.00")
        assert config.MAX_DAILY_TRANSACTIONS == 1000
        assert config.MAX_WITHDRAWAL_AMOUNT == Decimal("50000.00")
        assert config.MAX_REFUND_AMOUNT == Decimal("10000.00")
        assert config.MAX_DAILY_VOLUME == Decimal("5000000.00")
        assert config.MIN_ACCOUNT_BALANCE == Decimal("0.01")
        assert config.HIGH_RISK_THRESHOLD == 75
        assert config.MAX_ACCOUNTS_PER_HOLDER == 10
        assert config.ACCOUNT_NUMBER_PREFIX == "ACC"
        assert config.SYSTEM_LOCKED is False
        assert config.COMPLIANCE_AUDIT_MODE is False

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("MAX_DAILY_TRANSACTIONS", "5")
        monkeypatch.setenv("max_withdrawal_amount", "2500.50")

        config = Settings(_env_file=None)
        assert config.MAX_DAILY_TRANSACTIONS == 5
        assert config.MAX_WITHDRAWAL_AMOUNT == Decimal("2500.50")

    def test_overridden_limit_applies(self, monkeypatch):
        monkeypatch.setenv("MAX_REFUND_AMOUNT", "100")
        processor = TransactionProcessor(config=Settings(_env_file=None))

        assert processor.process_transaction(TransactionType.REFUND, "100.01", "X") == TransactionStatus.REJECTED


class TestOperatingContext:

    def test_defaults_off(self):
        context = OperatingContext()
        assert context.system_locked is False
        assert context.compliance_audit_mode is False

    def test_from_settings(self):
        config = Settings(_env_file=None, SYSTEM_LOCKED=True, COMPLIANCE_AUDIT_MODE=True)
        context = OperatingContext.from_settings(config)

        assert context.system_locked is True
        assert context.compliance_audit_mode is True

    def test_processor_builds_context_from_config(self):
        config = Settings(_env_file=None, SYSTEM_LOCKED=True)
        processor = TransactionProcessor(config=config)

        assert processor.execute_transfer(100, "A", "B") == TransactionStatus.PENDING


class TestLogging:

    def test_json_output(self, capsys, restore_root_logger):
        setup_logging("INFO", json_output=True)
        logging.getLogger("banking_core.test").info("Decision made", extra={"account_number": "ACC1"})

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["message"] == "Decision made"
        assert record["level"] == "INFO"
        assert record["service"] == "banking-core"
        assert record["account_number"] == "ACC1"
        assert "timestamp" in record

    def test_plain_output(self, capsys, restore_root_logger):
        setup_logging("DEBUG", json_output=False)
        logging.getLogger("banking_core.test").debug("Daily limits reset")

        out = capsys.readouterr().out
        assert "DEBUG banking_core.test Daily limits reset" in out

    def test_level_applied(self, restore_root_logger):
        setup_logging("WARNING", json_output=False)
        assert restore_root_logger.level == logging.WARNING
