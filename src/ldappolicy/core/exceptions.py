"""
LdapPolicy Exception Types

Custom exceptions for directory and configuration errors.

Policy violations (disabled, locked, expired...) are not exceptions;
they are returned as Failure values by the evaluators.
"""

from typing import Optional


class PolicyGateError(Exception):
    """Base exception for all LdapPolicy errors."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class DirectoryError(PolicyGateError):
    """
    Directory transport failed.

    Raised by the bind/search collaborator. The message is matched
    against the configured error definitions and is never shown to
    the end user as-is.
    """

    pass


class AttributeReadError(DirectoryError):
    """
    Reading an attribute value from the directory entry failed.

    A missing attribute is not an error; this is only raised when the
    underlying read itself blows up.
    """

    def __init__(self, attribute: str, message: str) -> None:
        super().__init__(f"Unable to read attribute {attribute}: {message}")
        self.attribute = attribute


class DateConversionError(DirectoryError):
    """A directory date value could not be converted to a timestamp."""

    def __init__(self, value: str, message: str = "Unrecognized date format") -> None:
        super().__init__(f"{message}: {value!r}")
        self.value = value


class ConfigurationError(PolicyGateError):
    """
    Invalid handler configuration.

    Raised at startup only, never during an authentication attempt.
    """

    pass
