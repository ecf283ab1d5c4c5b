"""
LdapPolicy Date Converters

Convert directory-native date values into timezone-aware datetimes.

Supported formats:
- GeneralizedTime (RFC 4517), e.g. "20240131235959Z"
- Windows FILETIME, e.g. Active Directory pwdLastSet
- Days since the Unix epoch, e.g. shadowLastChange

The converter's timezone is authoritative: expiration arithmetic and
"now" are both expressed in it.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import attrs

from ldappolicy.core.exceptions import ConfigurationError, DateConversionError


# Windows FILETIME counts 100-nanosecond intervals from this instant
FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_GENERALIZED_TIME = re.compile(
    r"(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})(?P<hour>\d{2})"
    r"(?P<minute>\d{2})?(?P<second>\d{2})?"
    r"(?:[.,](?P<fraction>\d+))?"
    r"(?P<zone>Z|[+-]\d{2}(?:\d{2})?)?"
)


def resolve_timezone(value: Union[str, tzinfo, None]) -> tzinfo:
    """
    Resolve a timezone name or object.

    Raises:
        ConfigurationError: Unknown timezone name
    """
    if value is None:
        return timezone.utc
    if isinstance(value, tzinfo):
        return value
    if value.upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown timezone: {value}") from e


@attrs.define(frozen=True)
class DateConverter(ABC):
    """
    Converts a raw directory date value to an aware datetime.

    Attributes:
        timezone: Zone used for results and for the current time
    """

    timezone: tzinfo = attrs.field(default=None, converter=resolve_timezone)

    @abstractmethod
    def convert(self, value: str) -> datetime:
        """
        Convert value to a datetime in this converter's timezone.

        Raises:
            DateConversionError: value is not in the expected format
        """
        ...

    def now(self) -> datetime:
        """Current time in this converter's timezone."""
        return datetime.now(self.timezone)

    def _in_zone(self, value: str, result: datetime) -> datetime:
        try:
            return result.astimezone(self.timezone)
        except OverflowError as e:
            raise DateConversionError(value, "Date out of range") from e


@attrs.define(frozen=True)
class GeneralizedTimeDateConverter(DateConverter):
    """
    LDAP GeneralizedTime values.

    Values without a zone designator are read as local time in the
    converter's timezone.
    """

    def convert(self, value: str) -> datetime:
        match = _GENERALIZED_TIME.fullmatch(value.strip())
        if match is None:
            raise DateConversionError(value, "Invalid GeneralizedTime")

        parts = match.groupdict()
        fraction = parts["fraction"] or "0"
        try:
            result = datetime(
                int(parts["year"]),
                int(parts["month"]),
                int(parts["day"]),
                int(parts["hour"]),
                int(parts["minute"] or 0),
                int(parts["second"] or 0),
                int(fraction[:6].ljust(6, "0")),
                tzinfo=self._zone_of(parts["zone"]),
            )
        except ValueError as e:
            raise DateConversionError(value, str(e)) from e

        return self._in_zone(value, result)

    def _zone_of(self, designator: Optional[str]) -> tzinfo:
        if designator is None:
            return self.timezone
        if designator == "Z":
            return timezone.utc
        sign = -1 if designator[0] == "-" else 1
        hours = int(designator[1:3])
        minutes = int(designator[3:5] or 0)
        return timezone(sign * timedelta(hours=hours, minutes=minutes))


@attrs.define(frozen=True)
class ActiveDirectoryDateConverter(DateConverter):
    """
    Windows FILETIME values (100ns intervals since 1601-01-01 UTC).

    Used for pwdLastSet and accountExpires.
    """

    def convert(self, value: str) -> datetime:
        try:
            ticks = int(value.strip())
        except ValueError as e:
            raise DateConversionError(value, "Invalid FILETIME") from e
        if ticks < 0:
            raise DateConversionError(value, "Invalid FILETIME")

        try:
            result = FILETIME_EPOCH + timedelta(microseconds=ticks // 10)
        except OverflowError as e:
            raise DateConversionError(value, "FILETIME out of range") from e
        return self._in_zone(value, result)


@attrs.define(frozen=True)
class EpochDaysDateConverter(DateConverter):
    """Whole days since 1970-01-01 UTC, as in shadowLastChange."""

    def convert(self, value: str) -> datetime:
        try:
            days = int(value.strip())
        except ValueError as e:
            raise DateConversionError(value, "Invalid day count") from e

        try:
            result = UNIX_EPOCH + timedelta(days=days)
        except OverflowError as e:
            raise DateConversionError(value, "Day count out of range") from e
        return self._in_zone(value, result)
