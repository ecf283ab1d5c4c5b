#!/usr/bin/env python3
"""
Password Policy Aware Login Example

Demonstrates how LdapPolicy decides the outcome of a login after the
directory has accepted the credentials.

Features:
1. Account control flag checks (disabled, locked)
2. Password expiration with a warning window
3. Per-user policy attributes and ignore flags
4. Classification of directory bind errors

Uses the in-memory SimulatedDirectory, so no directory server is needed.
"""

from datetime import datetime, timedelta, timezone

from ldappolicy import (
    ActiveDirectoryDateConverter,
    AuthenticatedWithWarning,
    PolicyAwareConfig,
    Rejected,
    create_policy_aware_authenticator,
    default_error_definitions,
)
from ldappolicy.directory import SimulatedDirectory
from ldappolicy.policy.dates import FILETIME_EPOCH


def filetime(moment: datetime) -> str:
    """Encode a datetime as an Active Directory FILETIME string."""
    delta = moment - FILETIME_EPOCH
    return str((delta // timedelta(microseconds=1)) * 10)


def describe(outcome) -> str:
    if isinstance(outcome, Rejected):
        c = outcome.classification
        return f"REJECTED  type={c.type} message={c.message!r}"
    if isinstance(outcome, AuthenticatedWithWarning):
        return f"WARNING   password expires in {outcome.days_remaining} day(s)"
    return "OK        authenticated"


def main():
    """Run a handful of logins through the policy checks."""

    print("=" * 70)
    print("LdapPolicy - Password Policy Aware Login")
    print("=" * 70)
    print()

    now = datetime.now(timezone.utc)

    # ==========================================================================
    # 1. Populate the directory
    # ==========================================================================
    directory = SimulatedDirectory(attributes_to_return=["cn", "mail"])

    accounts = {
        "alice": {"pwdLastSet": filetime(now - timedelta(days=5)), "userAccountControl": "512"},
        "bob": {"pwdLastSet": filetime(now - timedelta(days=80)), "userAccountControl": "512"},
        "carol": {"pwdLastSet": filetime(now - timedelta(days=120)), "userAccountControl": "512"},
        "dave": {"pwdLastSet": filetime(now - timedelta(days=5)), "userAccountControl": "514"},
        "erin": {"pwdLastSet": filetime(now - timedelta(days=400)), "userAccountControl": "66048"},
    }
    for name, attributes in accounts.items():
        directory.add_entry(name, "secret", f"cn={name},ou=people,dc=example,dc=com", attributes)

    directory.fail_with("frank", "AcceptSecurityContext error, data 775, v3839")

    # ==========================================================================
    # 2. Configure the authenticator
    # ==========================================================================
    config = PolicyAwareConfig(
        password_expiration_date_attribute="pwdLastSet",
        default_valid_password_days=90,
        default_password_warning_days=14,
        error_definitions=default_error_definitions(),
        password_policy_url="https://password.example.com",
    )
    auth = create_policy_aware_authenticator(
        directory,
        config=config,
        date_converter=ActiveDirectoryDateConverter(),
    )

    print(f"   Requested attributes: {', '.join(directory.attributes_to_return)}")
    print()

    # ==========================================================================
    # 3. Authenticate
    # ==========================================================================
    for name in ["alice", "bob", "carol", "dave", "erin", "frank"]:
        outcome = auth.authenticate(name, "secret")
        print(f"   {name:<6} {describe(outcome)}")

    outcome = auth.authenticate("alice", "wrong")
    print(f"   {'alice*':<6} {describe(outcome)}")
    print()


if __name__ == "__main__":
    main()
