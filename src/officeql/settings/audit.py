"""Audit update protocol settings."""

from pydantic import BaseModel, Field

from officeql.constants import AuditUpdatePolicy


class AuditSettings(BaseModel):
    """Configuration of the old/new audit update protocol.

    With ``update_policy=trust`` the ``<column>_old`` values supplied by the
    caller are carried for external audit logging only. With ``verify`` they
    become guards on the UPDATE so a concurrent change is not overwritten.
    """

    update_policy: AuditUpdatePolicy = Field(
        default=AuditUpdatePolicy.TRUST,
        description="How <column>_old values are treated by the old/new update protocol (trust, verify)"
    )
