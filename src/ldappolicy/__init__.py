"""
LdapPolicy - Password Policy Enforcement for Directory Logins

This package decides, after a successful directory bind, whether the
account may complete its login and whether the user should be warned
that their password is about to expire.

Checks:
- Account control flags (disabled, locked, password expired)
- Policy attributes (disabled, locked, must change password)
- Password expiration with a configurable warning window
- Classification of directory bind errors

Example Usage:
    from ldappolicy import (
        PolicyAwareAuthenticator,
        PolicyAwareConfig,
        ActiveDirectoryDateConverter,
    )

    config = PolicyAwareConfig(
        password_expiration_date_attribute="pwdLastSet",
        default_valid_password_days=90,
        default_password_warning_days=14,
    )
    auth = PolicyAwareAuthenticator(
        config=config,
        transport=my_transport,
        date_converter=ActiveDirectoryDateConverter(),
    )

    outcome = auth.authenticate("jdoe", "secret")
    if outcome.success:
        print(f"Logged in ({outcome.event_id})")
    else:
        print(f"Rejected: {outcome.classification.type}")
"""

from ldappolicy.core.config import PolicyAwareConfig
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
from ldappolicy.directory.authenticator import (
    PolicyAwareAuthenticator,
    create_policy_aware_authenticator,
)
from ldappolicy.policy.dates import (
    ActiveDirectoryDateConverter,
    EpochDaysDateConverter,
    GeneralizedTimeDateConverter,
)
from ldappolicy.policy.errors import ErrorDefinition, default_error_definitions

__version__ = "0.1.0"

__all__ = [
    # Main API
    "PolicyAwareAuthenticator",
    "PolicyAwareConfig",
    "create_policy_aware_authenticator",
    # Outcomes
    "AuthOutcome",
    "Authenticated",
    "AuthenticatedWithWarning",
    "Rejected",
    "Classification",
    "ErrorType",
    # Policy
    "AccountControlFlag",
    "PolicyConfiguration",
    "ErrorDefinition",
    "default_error_definitions",
    # Date converters
    "ActiveDirectoryDateConverter",
    "EpochDaysDateConverter",
    "GeneralizedTimeDateConverter",
    # Metadata
    "__version__",
]
