"""
Operating context: the operational switches shared by processors and managers.

Two flags influence decisions in the core:

  - system_locked: an operational kill-switch. While set, non-urgent
    transfers are held as PENDING and urgent transfers are only APPROVED,
    never COMPLETED.
  - compliance_audit_mode: while set, a high-risk account evaluation
    FREEZES the account instead of suspending it.

These are fields on an explicit object rather than module globals. Several
processors and managers can share one context by passing the same instance
to each constructor; flipping a flag on it is then visible to all of them
and to nobody else.
"""

from pydantic import BaseModel, ConfigDict

from banking_core.config import Settings, settings as default_settings


class OperatingContext(BaseModel):
    """Mutable operational flags consulted by transfer and risk logic."""

    model_config = ConfigDict(validate_assignment=True)

    system_locked: bool = False
    compliance_audit_mode: bool = False

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "OperatingContext":
        """Build a context whose flags start at the configured defaults."""
        config = config or default_settings
        return cls(
            system_locked=config.SYSTEM_LOCKED,
            compliance_audit_mode=config.COMPLIANCE_AUDIT_MODE,
        )
