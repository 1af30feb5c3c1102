"""
Core configuration using Pydantic Settings.

All limits and thresholds used by the transaction processor and the account
manager are loaded from environment variables, with an optional .env file
as a fallback. Every field has a default, so the core works out of the box
and a deployment only overrides what it needs.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Monetary limits are Decimals, never floats. "50000.01" read from the
environment compares exactly against a withdrawal ceiling of 50000.00.

Usage:
    from banking_core.config import settings
    print(settings.MAX_DAILY_TRANSACTIONS)
"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the banking core.

    Processors and managers take an optional Settings instance; tests build
    their own instances instead of mutating the singleton.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    APP_NAME: str = "banking-core"
    APP_VERSION: str = "0.1.0"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # --- Transaction limits ---
    MIN_TRANSACTION_AMOUNT: Decimal = Decimal("0.01")
    MAX_TRANSACTION_AMOUNT: Decimal = Decimal("1000000.00")
    MAX_DAILY_TRANSACTIONS: int = 1000
    MAX_WITHDRAWAL_AMOUNT: Decimal = Decimal("50000.00")
    MAX_REFUND_AMOUNT: Decimal = Decimal("10000.00")

    # Transfers above this amount get the extra urgent-transfer checks
    URGENT_TRANSFER_THRESHOLD: Decimal = Decimal("100000.00")
    MAX_DAILY_VOLUME: Decimal = Decimal("5000000.00")

    # Accounts rated HIGH_RISK by compliance cannot move more than this
    HIGH_RISK_COMPLIANCE_LIMIT: Decimal = Decimal("50000.00")

    # First transaction id handed out is TRANSACTION_ID_START + 1
    TRANSACTION_ID_START: int = 1000

    # --- Account limits ---
    MIN_ACCOUNT_BALANCE: Decimal = Decimal("0.01")
    HIGH_RISK_THRESHOLD: int = 75
    MAX_ACCOUNTS_PER_HOLDER: int = 10

    # Account numbers look like ACC500001, ACC500002, ...
    ACCOUNT_NUMBER_PREFIX: str = "ACC"
    ACCOUNT_NUMBER_START: int = 500000

    # Recipient of the "Account Verified" email
    VERIFICATION_EMAIL: str = "user@example.com"

    # --- Operating flags ---
    # Defaults for a fresh OperatingContext; see banking_core.context
    SYSTEM_LOCKED: bool = False
    COMPLIANCE_AUDIT_MODE: bool = False


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
