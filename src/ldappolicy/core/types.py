"""
LdapPolicy Core Types

Value types shared by the policy evaluators and the authenticator.

Design Principles:
- Immutable: All types use frozen attrs for safety
- Validated: Type constraints enforced at construction
- Tagged results: policy violations are values, not exceptions
"""

from __future__ import annotations

from enum import Enum, Flag
from typing import List, Optional, Union

import attrs
from attrs import field, validators


# =============================================================================
# ENUMS
# =============================================================================


class ErrorType(str, Enum):
    """
    Built-in classification types.

    Configured error definitions may carry any type string; these are
    the ones produced by the evaluators themselves. Being a str enum,
    members compare equal to their plain string values.
    """

    BAD_CREDENTIALS = "badCredentials"
    ACCOUNT_DISABLED = "accountDisabled"
    ACCOUNT_LOCKED = "accountLocked"
    ACCOUNT_PASSWORD_EXPIRED = "accountPasswordExpired"  # Flag-sourced
    ACCOUNT_MUST_CHANGE_PASSWORD = "accountMustChangePassword"
    PASSWORD_EXPIRED = "passwordExpired"  # Date-sourced, days_to_expiration=0
    PASSWORD_EXPIRING = "passwordExpiring"
    INVALID_LOGON_HOURS = "invalidLogonHours"
    INVALID_WORKSTATION = "invalidWorkstation"

    def __str__(self) -> str:
        return self.value


class AccountControlFlag(Flag):
    """
    Active Directory userAccountControl bits relevant to login.

    The attribute is a bitwise combination; only the bits below are
    interpreted.
    """

    ACCOUNT_DISABLED = 0x00000002
    LOCKOUT = 0x00000010
    PASSWD_NOTREQD = 0x00000020
    DONT_EXPIRE_PASSWD = 0x00010000
    PASSWORD_EXPIRED = 0x00800000

    def is_set(self, bitmask: int) -> bool:
        """Return True if this flag's bit is set in bitmask."""
        return bitmask > 0 and (bitmask & self.value) == self.value

    @classmethod
    def flags_in(cls, bitmask: int) -> List["AccountControlFlag"]:
        """List every known flag present in bitmask."""
        return [flag for flag in cls if flag.is_set(bitmask)]


# =============================================================================
# POLICY CONFIGURATION
# =============================================================================


@attrs.define(frozen=True, slots=True)
class PolicyConfiguration:
    """
    Per-identity password policy snapshot.

    Built fresh for every authentication attempt from the attributes of
    the authenticated entry, then discarded.

    Attributes:
        identity: Distinguished name of the authenticated entry
        raw_expiration_date: Expiration or last-change date, directory format
        valid_password_days: Days a password stays valid after the stored date
        password_warning_days: Days before expiration to start warning
        ignore_expiration_warning: Value of the ignore-warning attribute
        account_disabled: Disabled attribute is set
        account_locked: Locked attribute is set
        must_change_password: Must-change attribute is set
        user_account_control: Account control bitmask

    INVARIANT: raw_expiration_date is present (no date, no configuration)
    """

    identity: str = field(validator=[validators.instance_of(str), validators.min_len(1)])
    raw_expiration_date: str = field(validator=validators.instance_of(str))
    valid_password_days: int = field(
        default=90,
        validator=[validators.instance_of(int), validators.ge(0)],
    )
    password_warning_days: int = field(
        default=30,
        validator=[validators.instance_of(int), validators.ge(0)],
    )
    ignore_expiration_warning: Optional[str] = None
    account_disabled: bool = False
    account_locked: bool = False
    must_change_password: bool = False
    user_account_control: int = field(
        default=0,
        validator=[validators.instance_of(int), validators.ge(0)],
    )


# =============================================================================
# RESULT TYPES
# =============================================================================


@attrs.define(frozen=True, slots=True)
class Classification:
    """
    Caller-facing reason for a rejected login.

    Attributes:
        type: Classification tag (an ErrorType or a configured type)
        message: Message safe to show or log; never raw transport text
        identity: Identity the rejection applies to, if known
        attribute: Attribute or flag that triggered the rejection
        days_to_expiration: Days left before expiration (0 when expired)
    """

    type: str
    message: str
    identity: Optional[str] = None
    attribute: Optional[str] = None
    days_to_expiration: Optional[int] = None

    @classmethod
    def bad_credentials(cls, identity: Optional[str] = None) -> Classification:
        """Generic classification when nothing more specific is known."""
        return cls(
            type=ErrorType.BAD_CREDENTIALS,
            message="Invalid credentials",
            identity=identity,
        )


@attrs.define(frozen=True, slots=True)
class Authenticated:
    """
    Login completed with no policy event.

    policy_checked is False when the checks were skipped (no entry
    found, or no expiration date attribute).
    """

    identity: str
    policy_checked: bool = True

    @property
    def success(self) -> bool:
        return True

    @property
    def event_id(self) -> str:
        return "success"


@attrs.define(frozen=True, slots=True)
class AuthenticatedWithWarning:
    """Login completed, but the password expires soon."""

    identity: str
    days_remaining: int = field(validator=validators.ge(0))
    policy_url: Optional[str] = None

    @property
    def success(self) -> bool:
        return True

    @property
    def event_id(self) -> str:
        return ErrorType.PASSWORD_EXPIRING.value


@attrs.define(frozen=True, slots=True)
class Rejected:
    """Login refused."""

    classification: Classification
    policy_url: Optional[str] = None

    @property
    def success(self) -> bool:
        return False

    @property
    def event_id(self) -> str:
        return str(self.classification.type)

    @property
    def days_to_expiration(self) -> Optional[int]:
        return self.classification.days_to_expiration


AuthOutcome = Union[Authenticated, AuthenticatedWithWarning, Rejected]
