"""
Pytest configuration and shared fixtures for LdapPolicy tests.
"""

import pytest
from datetime import datetime, timedelta, timezone

from ldappolicy.core.config import PolicyAwareConfig
from ldappolicy.core.types import PolicyConfiguration
from ldappolicy.directory.authenticator import PolicyAwareAuthenticator
from ldappolicy.directory.transport import SimulatedDirectory
from ldappolicy.policy.dates import GeneralizedTimeDateConverter


# =============================================================================
# TIME-RELATED FIXTURES
# =============================================================================


FIXED_NOW = datetime(2026, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed current time (UTC)."""
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    """Clock returning FIXED_NOW in the requested timezone."""
    return lambda tz: FIXED_NOW.astimezone(tz)


@pytest.fixture
def date_converter() -> GeneralizedTimeDateConverter:
    """GeneralizedTime converter in UTC."""
    return GeneralizedTimeDateConverter()


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================


@pytest.fixture
def policy_config() -> PolicyAwareConfig:
    """Config reading every policy attribute."""
    return PolicyAwareConfig(
        password_expiration_date_attribute="passwordChangedTime",
        password_warning_days_attribute="passwordWarningDays",
        valid_password_days_attribute="passwordValidDays",
        ignore_expiration_warning_attribute="passwordNoWarning",
        account_disabled_attribute="accountDisabled",
        account_locked_attribute="accountLocked",
        account_must_change_password_attribute="passwordMustChange",
        ignore_expiration_warning_flags=["TRUE", "NEVER"],
        password_policy_url="https://password.example.com",
    )


# =============================================================================
# DIRECTORY FIXTURES
# =============================================================================


@pytest.fixture
def directory() -> SimulatedDirectory:
    """Empty simulated directory."""
    return SimulatedDirectory(attributes_to_return=["cn", "mail"])


@pytest.fixture
def authenticator(
    policy_config: PolicyAwareConfig,
    directory: SimulatedDirectory,
    date_converter: GeneralizedTimeDateConverter,
    fixed_clock,
) -> PolicyAwareAuthenticator:
    """Authenticator over the simulated directory with a fixed clock."""
    return PolicyAwareAuthenticator(
        config=policy_config,
        transport=directory,
        date_converter=date_converter,
        clock=fixed_clock,
    )


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def generalized_time(moment: datetime) -> str:
    """Format a datetime as GeneralizedTime (UTC)."""
    return moment.astimezone(timezone.utc).strftime("%Y%m%d%H%M%SZ")


def days_ago(days: int) -> str:
    """GeneralizedTime for FIXED_NOW minus days."""
    return generalized_time(FIXED_NOW - timedelta(days=days))


def make_policy(**overrides) -> PolicyConfiguration:
    """Helper to create a policy configuration."""
    values = {
        "identity": "cn=jdoe,ou=people,dc=example,dc=com",
        "raw_expiration_date": days_ago(0),
    }
    values.update(overrides)
    return PolicyConfiguration(**values)


# =============================================================================
# HELPER FIXTURES
# =============================================================================


@pytest.fixture(name="days_ago")
def days_ago_fixture():
    """GeneralizedTime factory relative to the fixed clock."""
    return days_ago


@pytest.fixture(name="make_policy")
def make_policy_fixture():
    """PolicyConfiguration factory."""
    return make_policy
