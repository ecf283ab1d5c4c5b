"""
LdapPolicy Attribute Extraction

Single-value lookups over a directory entry's attribute set.

Attribute sets come from the transport as a mapping of attribute name
to value, where a value may be a string, bytes, or a list of either
(multi-valued attributes). Only the first value is used.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import attrs

from ldappolicy.core.exceptions import AttributeReadError


def _first_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


@attrs.define(frozen=True, slots=True)
class AttributeExtractor:
    """
    Read-only view over an attribute set.

    Lookups are exact first, then case-insensitive, since LDAP
    attribute names are case-insensitive.
    """

    attributes: Mapping[str, Any] = attrs.field(factory=dict)

    def get(self, name: Optional[str]) -> Optional[str]:
        """
        Return the value of attribute name as a string.

        Args:
            name: Attribute name; None or blank means "not configured"

        Returns:
            The first value, or None if not configured or not present

        Raises:
            AttributeReadError: The underlying read failed
        """
        if not name or not name.strip():
            return None

        try:
            raw = self._lookup(name)
        except Exception as e:
            raise AttributeReadError(name, str(e)) from e

        value = _first_value(raw)
        if value is None:
            return None

        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as e:
                raise AttributeReadError(name, str(e)) from e

        return str(value)

    def _lookup(self, name: str) -> Any:
        if name in self.attributes:
            return self.attributes[name]

        lowered = name.lower()
        for key in self.attributes:
            if key.lower() == lowered:
                return self.attributes[key]
        return None
