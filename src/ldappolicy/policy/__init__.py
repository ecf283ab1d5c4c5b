"""
LdapPolicy Policy Module

Password policy evaluation for an authenticated directory entry.

Components:
- attributes: Single-value attribute lookups
- configuration: Per-identity PolicyConfiguration builder
- status: Account status checks (flags and policy attributes)
- expiration: Password expiration and warning window
- dates: Directory date converters
- errors: Directory error classification
"""

from ldappolicy.policy.attributes import AttributeExtractor
from ldappolicy.policy.configuration import build_policy_configuration
from ldappolicy.policy.status import AccountStatus, AccountStatusEvaluator
from ldappolicy.policy.expiration import (
    NO_WARNING,
    ExpirationCalculator,
    ExpirationCheck,
    ExpirationStatus,
)
from ldappolicy.policy.dates import (
    ActiveDirectoryDateConverter,
    DateConverter,
    EpochDaysDateConverter,
    GeneralizedTimeDateConverter,
)
from ldappolicy.policy.errors import (
    ErrorClassifier,
    ErrorDefinition,
    default_error_definitions,
)

__all__ = [
    "AttributeExtractor",
    "build_policy_configuration",
    "AccountStatus",
    "AccountStatusEvaluator",
    "NO_WARNING",
    "ExpirationCalculator",
    "ExpirationCheck",
    "ExpirationStatus",
    "DateConverter",
    "ActiveDirectoryDateConverter",
    "EpochDaysDateConverter",
    "GeneralizedTimeDateConverter",
    "ErrorClassifier",
    "ErrorDefinition",
    "default_error_definitions",
]
