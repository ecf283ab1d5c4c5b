"""
LdapPolicy Password Expiration

Computes when a password expires and whether the user should be
warned about it.

    expiration    = stored date + valid_password_days
    warning start = expiration - password_warning_days

All arithmetic and the current time use the date converter's timezone
so that day counts do not shift across zone boundaries.
"""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Optional

import attrs
import structlog
from returns.result import Failure, Result, Success

from ldappolicy.core.exceptions import DateConversionError
from ldappolicy.core.types import (
    AccountControlFlag,
    Classification,
    ErrorType,
    PolicyConfiguration,
)
from ldappolicy.policy.dates import DateConverter

if TYPE_CHECKING:
    from ldappolicy.core.config import PolicyAwareConfig

logger = structlog.get_logger()

# Days-remaining value meaning "do not warn"
NO_WARNING = -1

Clock = Callable[[tzinfo], datetime]


class ExpirationStatus(Enum):
    """Outcome of the expiration check."""

    EXEMPT = auto()  # Ignore flag or DONT_EXPIRE_PASSWD
    NOT_WARNED = auto()  # Outside the warning window
    WARN = auto()
    EXPIRED = auto()


@attrs.define(frozen=True, slots=True)
class ExpirationCheck:
    """
    Result of an expiration check.

    days_to_expiration is NO_WARNING unless status is WARN or EXPIRED,
    and 0 when EXPIRED.
    """

    status: ExpirationStatus
    days_to_expiration: int = NO_WARNING
    expiration: Optional[datetime] = None

    @property
    def should_warn(self) -> bool:
        return self.status is ExpirationStatus.WARN


@attrs.define(frozen=True, slots=True)
class ExpirationCalculator:
    """
    Password expiration and warning window policy.

    Attributes:
        config: Handler configuration (ignore flags, always-warn)
        date_converter: Converter for the stored date attribute
        clock: Optional "now" provider, called with the converter's
            timezone; defaults to the converter's own clock
    """

    config: PolicyAwareConfig
    date_converter: DateConverter
    clock: Optional[Clock] = None

    def now(self) -> datetime:
        """Current time in the converter's timezone."""
        tz = self.date_converter.timezone
        if self.clock is None:
            return self.date_converter.now()
        return self.clock(tz).astimezone(tz)

    def is_password_set_to_never_expire(self, policy: PolicyConfiguration) -> bool:
        """
        Check whether the expiration check is skipped for this account.

        True when the ignore-warning attribute holds one of the
        configured ignore flags, or DONT_EXPIRE_PASSWD is set.
        """
        ignore_value = policy.ignore_expiration_warning
        if ignore_value and ignore_value.strip():
            if ignore_value in self.config.ignore_expiration_warning_flags:
                return True

        return AccountControlFlag.DONT_EXPIRE_PASSWD.is_set(policy.user_account_control)

    def expiration_date(self, policy: PolicyConfiguration) -> datetime:
        """
        Stored date plus the validity window.

        Raises:
            DateConversionError: Stored date cannot be converted, or the
                expiration falls outside the representable range
        """
        stored = self.date_converter.convert(policy.raw_expiration_date)
        try:
            expiration = stored + timedelta(days=policy.valid_password_days)
        except OverflowError as e:
            raise DateConversionError(
                policy.raw_expiration_date, "Expiration date out of range"
            ) from e
        logger.debug(
            "expiration_date_computed",
            identity=policy.identity,
            stored=stored.isoformat(),
            valid_days=policy.valid_password_days,
            expiration=expiration.isoformat(),
        )
        return expiration

    def check(self, policy: PolicyConfiguration) -> ExpirationCheck:
        """
        Run the expiration check.

        Raises:
            DateConversionError: Stored date cannot be converted, or the
                expiration falls outside the representable range
        """
        if self.is_password_set_to_never_expire(policy):
            logger.debug("password_never_expires", identity=policy.identity)
            return ExpirationCheck(status=ExpirationStatus.EXEMPT)

        expiration = self.expiration_date(policy)
        now = self.now()

        # Whole days, truncated
        days = (expiration - now).days if expiration > now else 0

        if expiration <= now:
            logger.info(
                "password_expired",
                identity=policy.identity,
                expiration=expiration.isoformat(),
                now=now.isoformat(),
            )
            return ExpirationCheck(
                status=ExpirationStatus.EXPIRED,
                days_to_expiration=0,
                expiration=expiration,
            )

        warning_start = self.warning_start(expiration, policy)

        if self.config.always_display_password_expiration_warning:
            logger.debug("password_expiration_warn_all", identity=policy.identity, days=days)
        elif warning_start is None or now >= warning_start:
            logger.debug("password_expiration_in_window", identity=policy.identity, days=days)
        else:
            logger.debug(
                "password_not_expiring",
                identity=policy.identity,
                days=days,
                warning_start=warning_start.isoformat(),
            )
            return ExpirationCheck(
                status=ExpirationStatus.NOT_WARNED,
                expiration=expiration,
            )

        return ExpirationCheck(
            status=ExpirationStatus.WARN,
            days_to_expiration=days,
            expiration=expiration,
        )

    def warning_start(
        self, expiration: datetime, policy: PolicyConfiguration
    ) -> Optional[datetime]:
        """
        Start of the warning window.

        None when the window reaches back past the earliest
        representable date, i.e. it has always been open.
        """
        try:
            return expiration - timedelta(days=policy.password_warning_days)
        except OverflowError:
            return None

    def days_to_expiration(self, policy: PolicyConfiguration) -> int:
        """Days to warn about: NO_WARNING, 0 when expired, else days left."""
        return self.check(policy).days_to_expiration

    def evaluate(
        self, policy: PolicyConfiguration
    ) -> Result[ExpirationCheck, Classification]:
        """
        Evaluate password expiration.

        Returns:
            Success(check) unless the password has expired
            Failure(classification) with days_to_expiration=0 otherwise

        Raises:
            DateConversionError: Stored date cannot be converted
        """
        result = self.check(policy)
        if result.status is not ExpirationStatus.EXPIRED:
            if result.should_warn:
                logger.info(
                    "password_expiration_warning",
                    identity=policy.identity,
                    days=result.days_to_expiration,
                )
            return Success(result)

        return Failure(
            Classification(
                type=ErrorType.PASSWORD_EXPIRED,
                message="Password has expired",
                identity=policy.identity,
                attribute=self.config.password_expiration_date_attribute,
                days_to_expiration=0,
            )
        )
