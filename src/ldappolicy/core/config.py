"""
LdapPolicy Configuration

Immutable handler configuration, fixed at startup and shared by every
authentication attempt.
"""

from __future__ import annotations

import re
from typing import Any, FrozenSet, List, Mapping, Optional, Tuple

import attrs
from attrs import field, validators

from ldappolicy.core.exceptions import ConfigurationError
from ldappolicy.policy.errors import ErrorDefinition, definitions_from_config


_optional_str = validators.optional(validators.instance_of(str))
_non_negative = [validators.instance_of(int), validators.ge(0)]


def _flag_set(value: Any) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset([value])
    return frozenset(str(v) for v in value)


@attrs.define(frozen=True, slots=True)
class PolicyAwareConfig:
    """
    Password policy handler configuration.

    Attribute names set to None (or blank) are not read.

    Attributes:
        password_expiration_date_attribute: Expiration or last-change date
        password_warning_days_attribute: Per-user warning window
        valid_password_days_attribute: Per-user validity window
        ignore_expiration_warning_attribute: Value compared to the ignore flags
        account_disabled_attribute: Boolean "disabled" attribute
        account_locked_attribute: Boolean "locked" attribute
        account_must_change_password_attribute: Boolean "must change" attribute
        user_account_control_attribute: Account control bitmask attribute
        default_valid_password_days: Validity window when not set per user
        default_password_warning_days: Warning window when not set per user
        ignore_expiration_warning_flags: Values that skip the expiration check
        always_display_password_expiration_warning: Warn regardless of window
        error_definitions: Ordered directory error definitions
        password_policy_url: Where users can change their password
    """

    password_expiration_date_attribute: Optional[str] = field(default=None, validator=_optional_str)
    password_warning_days_attribute: Optional[str] = field(default=None, validator=_optional_str)
    valid_password_days_attribute: Optional[str] = field(default=None, validator=_optional_str)
    ignore_expiration_warning_attribute: Optional[str] = field(default=None, validator=_optional_str)
    account_disabled_attribute: Optional[str] = field(default=None, validator=_optional_str)
    account_locked_attribute: Optional[str] = field(default=None, validator=_optional_str)
    account_must_change_password_attribute: Optional[str] = field(
        default=None, validator=_optional_str
    )
    user_account_control_attribute: Optional[str] = field(
        default="userAccountControl", validator=_optional_str
    )
    default_valid_password_days: int = field(default=90, validator=_non_negative)
    default_password_warning_days: int = field(default=30, validator=_non_negative)
    ignore_expiration_warning_flags: FrozenSet[str] = field(
        factory=frozenset, converter=_flag_set
    )
    always_display_password_expiration_warning: bool = field(
        default=False, validator=validators.instance_of(bool)
    )
    error_definitions: Tuple[ErrorDefinition, ...] = field(
        factory=tuple, converter=definitions_from_config
    )
    password_policy_url: Optional[str] = field(default=None, validator=_optional_str)

    def policy_attribute_names(self) -> List[str]:
        """
        Every configured, non-blank policy attribute name.

        These must be requested from the directory alongside whatever
        the transport already returns.
        """
        names = [
            self.user_account_control_attribute,
            self.account_disabled_attribute,
            self.account_locked_attribute,
            self.account_must_change_password_attribute,
            self.ignore_expiration_warning_attribute,
            self.password_expiration_date_attribute,
            self.password_warning_days_attribute,
            self.valid_password_days_attribute,
        ]
        return [name for name in names if name and name.strip()]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PolicyAwareConfig":
        """
        Create config from a plain mapping, e.g. a parsed JSON document.

        Keys are the field names of this class.

        Raises:
            ConfigurationError: Unknown key or invalid value
        """
        known = {a.name for a in attrs.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

        try:
            return cls(**dict(data))
        except (TypeError, ValueError, KeyError, re.error) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
