"""
LdapPolicy Directory Module

Directory-facing side of the package.

Components:
- transport: DirectoryTransport contract and SimulatedDirectory
- authenticator: PolicyAwareAuthenticator
"""

from ldappolicy.directory.transport import (
    BindResult,
    DirectoryEntry,
    DirectoryTransport,
    SimulatedDirectory,
)
from ldappolicy.directory.authenticator import (
    PolicyAwareAuthenticator,
    create_policy_aware_authenticator,
)

__all__ = [
    "BindResult",
    "DirectoryEntry",
    "DirectoryTransport",
    "SimulatedDirectory",
    "PolicyAwareAuthenticator",
    "create_policy_aware_authenticator",
]
