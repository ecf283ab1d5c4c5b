"""
LdapPolicy Configuration Builder

Assembles a PolicyConfiguration for one authenticated entry from its
attributes and the handler defaults.

Every per-user attribute is optional. Malformed numeric values fall
back to the default, and malformed booleans read as False. Only the
expiration date attribute is mandatory: without it no policy applies.
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Mapping, Optional

import structlog

from ldappolicy.core.types import PolicyConfiguration
from ldappolicy.policy.attributes import AttributeExtractor

if TYPE_CHECKING:
    from ldappolicy.core.config import PolicyAwareConfig

logger = structlog.get_logger()

_NON_NEGATIVE_INT = re.compile(r"[0-9]+")

# Largest day count datetime arithmetic accepts
MAX_DAY_COUNT = timedelta.max.days


def parse_non_negative_int(value: Optional[str]) -> Optional[int]:
    """Parse a non-negative integer, returning None for anything else."""
    if value is None:
        return None
    value = value.strip()
    if not _NON_NEGATIVE_INT.fullmatch(value):
        return None
    try:
        return int(value)
    except ValueError:
        # Exceeds the interpreter's integer string conversion limit
        return None


def parse_day_count(value: Optional[str]) -> Optional[int]:
    """Parse a day count, returning None when unparseable or beyond MAX_DAY_COUNT."""
    days = parse_non_negative_int(value)
    if days is None or days > MAX_DAY_COUNT:
        return None
    return days


def parse_boolean(value: Optional[str]) -> bool:
    """Only "true" (any case, no surrounding whitespace) is true."""
    if value is None:
        return False
    return value.lower() == "true"


def build_policy_configuration(
    identity: str,
    attributes: Mapping[str, Any],
    config: PolicyAwareConfig,
) -> Optional[PolicyConfiguration]:
    """
    Build the password policy snapshot for an authenticated entry.

    Args:
        identity: Distinguished name of the entry
        attributes: The entry's attribute set
        config: Handler configuration (attribute names and defaults)

    Returns:
        PolicyConfiguration, or None when no policy applies

    Raises:
        AttributeReadError: Reading an attribute failed
    """
    extractor = AttributeExtractor(attributes)

    expiration_date = extractor.get(config.password_expiration_date_attribute)
    if expiration_date is None:
        logger.warning(
            "policy_configuration_skipped",
            identity=identity,
            reason="no expiration date value",
            attribute=config.password_expiration_date_attribute,
        )
        return None

    warning_days = config.default_password_warning_days
    raw = extractor.get(config.password_warning_days_attribute)
    parsed = parse_day_count(raw)
    if parsed is not None:
        warning_days = parsed
    elif raw is not None:
        logger.debug(
            "policy_attribute_ignored",
            identity=identity,
            attribute=config.password_warning_days_attribute,
            value=raw,
        )

    valid_days = config.default_valid_password_days
    raw = extractor.get(config.valid_password_days_attribute)
    parsed = parse_day_count(raw)
    if parsed is not None:
        valid_days = parsed
    elif raw is not None:
        logger.debug(
            "policy_attribute_ignored",
            identity=identity,
            attribute=config.valid_password_days_attribute,
            value=raw,
        )

    user_account_control = 0
    raw = extractor.get(config.user_account_control_attribute)
    parsed = parse_non_negative_int(raw)
    if parsed is not None:
        user_account_control = parsed
    elif raw is not None:
        logger.warning(
            "account_control_unparseable",
            identity=identity,
            attribute=config.user_account_control_attribute,
            value=raw,
        )

    policy = PolicyConfiguration(
        identity=identity,
        raw_expiration_date=expiration_date,
        valid_password_days=valid_days,
        password_warning_days=warning_days,
        ignore_expiration_warning=extractor.get(config.ignore_expiration_warning_attribute),
        account_disabled=parse_boolean(extractor.get(config.account_disabled_attribute)),
        account_locked=parse_boolean(extractor.get(config.account_locked_attribute)),
        must_change_password=parse_boolean(
            extractor.get(config.account_must_change_password_attribute)
        ),
        user_account_control=user_account_control,
    )

    logger.debug(
        "policy_configuration_built",
        identity=identity,
        valid_days=valid_days,
        warning_days=warning_days,
        user_account_control=user_account_control,
    )
    return policy
