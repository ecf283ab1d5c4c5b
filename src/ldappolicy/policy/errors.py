"""
LdapPolicy Error Classification

Translates directory error messages into caller-facing classifications.

Definitions are tried in declaration order and the first match wins.
Active Directory reports bind failures as an LDAP 49 with a sub-code
embedded in the diagnostic text, e.g.:

    80090308: LdapErr: DSID-0C09042A, comment: AcceptSecurityContext error, data 775, v3839

so patterns are searched for anywhere in the message.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Pattern, Tuple

import attrs
import structlog
from attrs import field, validators

from ldappolicy.core.types import Classification, ErrorType

logger = structlog.get_logger()


def _compile(pattern: object) -> Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(str(pattern))


@attrs.define(frozen=True, slots=True)
class ErrorDefinition:
    """
    Maps a directory error message pattern to a classification type.

    Attributes:
        pattern: Regular expression searched for in the error message
        type: Classification type produced on match
        message: Message carried by the classification
    """

    pattern: Pattern[str] = field(converter=_compile)
    type: str = field(validator=[validators.instance_of(str), validators.min_len(1)])
    message: str = ""

    def matches(self, error_message: Optional[str]) -> bool:
        """Check whether this definition applies to error_message."""
        if not error_message:
            return False
        return self.pattern.search(error_message) is not None

    def classify(self, identity: Optional[str] = None) -> Classification:
        return Classification(
            type=self.type,
            message=self.message or f"Authentication failed ({self.type})",
            identity=identity,
        )


@attrs.define(frozen=True, slots=True)
class ErrorClassifier:
    """
    Ordered, first-match error classifier.

    With no definitions configured every error classifies as
    bad credentials.
    """

    definitions: Tuple[ErrorDefinition, ...] = field(converter=tuple, factory=tuple)

    def classify(
        self,
        error_message: Optional[str],
        identity: Optional[str] = None,
    ) -> Classification:
        """
        Classify a directory error message.

        Args:
            error_message: Raw message from the transport (may be None)
            identity: Identity the error relates to

        Returns:
            Classification of the first matching definition, or the
            generic bad credentials classification
        """
        if not self.definitions:
            logger.debug("no_error_definitions", error=error_message)
            return Classification.bad_credentials(identity)

        for definition in self.definitions:
            if definition.matches(error_message):
                logger.debug(
                    "directory_error_classified",
                    error=error_message,
                    pattern=definition.pattern.pattern,
                    type=str(definition.type),
                )
                return definition.classify(identity)

        logger.debug("directory_error_unmatched", error=error_message)
        return Classification.bad_credentials(identity)


def default_error_definitions() -> Tuple[ErrorDefinition, ...]:
    """
    Error definitions for Active Directory bind sub-codes.

    Returns:
        Definitions for the common AcceptSecurityContext "data" codes
    """
    return (
        ErrorDefinition(
            pattern=r"data\s+533\b",
            type=ErrorType.ACCOUNT_DISABLED,
            message="Account is disabled",
        ),
        ErrorDefinition(
            pattern=r"data\s+701\b",
            type=ErrorType.ACCOUNT_DISABLED,
            message="Account has expired",
        ),
        ErrorDefinition(
            pattern=r"data\s+775\b",
            type=ErrorType.ACCOUNT_LOCKED,
            message="Account is locked",
        ),
        ErrorDefinition(
            pattern=r"data\s+532\b",
            type=ErrorType.ACCOUNT_PASSWORD_EXPIRED,
            message="Account password has expired",
        ),
        ErrorDefinition(
            pattern=r"data\s+773\b",
            type=ErrorType.ACCOUNT_MUST_CHANGE_PASSWORD,
            message="Password must be changed",
        ),
        ErrorDefinition(
            pattern=r"data\s+530\b",
            type=ErrorType.INVALID_LOGON_HOURS,
            message="Login not permitted at this time",
        ),
        ErrorDefinition(
            pattern=r"data\s+531\b",
            type=ErrorType.INVALID_WORKSTATION,
            message="Login not permitted from this workstation",
        ),
    )


def definitions_from_config(entries: Iterable[object]) -> Tuple[ErrorDefinition, ...]:
    """
    Build error definitions from plain configuration values.

    Each entry is either an ErrorDefinition or a mapping with
    "pattern", "type" and optional "message" keys.
    """
    definitions = []
    for entry in entries:
        if isinstance(entry, ErrorDefinition):
            definitions.append(entry)
            continue
        if not isinstance(entry, dict):
            raise TypeError(f"Unsupported error definition: {entry!r}")
        definitions.append(
            ErrorDefinition(
                pattern=entry["pattern"],
                type=entry["type"],
                message=entry.get("message", ""),
            )
        )
    return tuple(definitions)
