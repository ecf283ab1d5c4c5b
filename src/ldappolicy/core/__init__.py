"""
LdapPolicy Core Module

Provides foundational types shared by the policy evaluators and the
authenticator.

Components:
- types: Policy configuration, flags, classifications and outcomes
- config: Immutable handler configuration
- exceptions: Custom exception types
"""

from ldappolicy.core.types import (
    AccountControlFlag,
    Authenticated,
    AuthenticatedWithWarning,
    AuthOutcome,
    Classification,
    ErrorType,
    PolicyConfiguration,
    Rejected,
)
from ldappolicy.core.exceptions import (
    AttributeReadError,
    ConfigurationError,
    DateConversionError,
    DirectoryError,
    PolicyGateError,
)

__all__ = [
    # Types
    "AccountControlFlag",
    "Authenticated",
    "AuthenticatedWithWarning",
    "AuthOutcome",
    "Classification",
    "ErrorType",
    "PolicyConfiguration",
    "Rejected",
    # Exceptions
    "PolicyGateError",
    "DirectoryError",
    "AttributeReadError",
    "DateConversionError",
    "ConfigurationError",
]
