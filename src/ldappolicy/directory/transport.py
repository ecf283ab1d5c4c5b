"""
LdapPolicy Directory Transport

Contract for the directory bind collaborator, plus an in-memory
directory for tests, examples and dry runs.

Transport Modes:
- Simulated: SimulatedDirectory, entries held in memory
- Real: any DirectoryTransport implementation wrapping an LDAP client
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

import attrs
import structlog

from ldappolicy.core.exceptions import DirectoryError

logger = structlog.get_logger()


@attrs.define(frozen=True, slots=True)
class DirectoryEntry:
    """
    An entry located by the transport after a successful bind.

    Attributes:
        name: Full name in the directory namespace (distinguished name)
        attributes: Attribute name to value(s)
    """

    name: str
    attributes: Mapping[str, Any] = attrs.field(factory=dict)


@attrs.define(frozen=True, slots=True)
class BindResult:
    """
    Result of a bind attempt.

    Attributes:
        success: Credentials were accepted
        entry: The authenticated entry, if it could be located
        message: Directory diagnostic message for a refused bind
    """

    success: bool
    entry: Optional[DirectoryEntry] = None
    message: str = ""


class DirectoryTransport(ABC):
    """
    Directory bind/search collaborator.

    Implementations raise DirectoryError (with the directory's
    diagnostic message) when the bind or search fails outright.
    """

    attributes_to_return: List[str]

    @abstractmethod
    def bind(self, identity: str, secret: str) -> BindResult:
        """Bind as identity and return the authenticated entry."""
        ...


@attrs.define
class SimulatedDirectory(DirectoryTransport):
    """
    In-memory directory.

    Example:
        directory = SimulatedDirectory()
        directory.add_entry(
            "jdoe",
            "secret",
            "cn=jdoe,ou=people,dc=example,dc=com",
            {"pwdLastSet": "133000000000000000"},
        )
        result = directory.bind("jdoe", "secret")
    """

    attributes_to_return: List[str] = attrs.Factory(list)
    _entries: Dict[str, DirectoryEntry] = attrs.Factory(dict)
    _secrets: Dict[str, str] = attrs.Factory(dict)
    _errors: Dict[str, str] = attrs.Factory(dict)
    _logger: Any = attrs.Factory(lambda: structlog.get_logger())

    def add_entry(
        self,
        identity: str,
        secret: str,
        name: Optional[str] = None,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Register an account.

        Args:
            identity: Login name
            secret: Password
            name: Distinguished name; None simulates an entry that
                cannot be located after bind
            attributes: Attribute values of the entry
        """
        self._secrets[identity] = secret
        if name is None:
            self._entries.pop(identity, None)
        else:
            self._entries[identity] = DirectoryEntry(name=name, attributes=dict(attributes or {}))

    def fail_with(self, identity: str, message: str) -> None:
        """Make every bind for identity raise DirectoryError(message)."""
        self._errors[identity] = message

    def bind(self, identity: str, secret: str) -> BindResult:
        self._logger.debug("simulated_bind", identity=identity)

        if identity in self._errors:
            raise DirectoryError(self._errors[identity])

        if self._secrets.get(identity) != secret:
            return BindResult(
                success=False,
                message="80090308: LdapErr: DSID-0C09042A, comment: "
                "AcceptSecurityContext error, data 52e, v3839",
            )

        entry = self._entries.get(identity)
        if entry is None:
            return BindResult(success=True)

        return BindResult(success=True, entry=self._filter(entry))

    def _filter(self, entry: DirectoryEntry) -> DirectoryEntry:
        if not self.attributes_to_return:
            return entry
        wanted = {name.lower() for name in self.attributes_to_return}
        attributes = {k: v for k, v in entry.attributes.items() if k.lower() in wanted}
        return DirectoryEntry(name=entry.name, attributes=attributes)
