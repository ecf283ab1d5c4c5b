"""
Unit tests for ldappolicy.policy.expiration and ldappolicy.policy.dates.

Tests expiration arithmetic, the warning window, and date conversion.
"""

import pytest
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from returns.result import Failure, Success

from ldappolicy.core.config import PolicyAwareConfig
from ldappolicy.core.exceptions import ConfigurationError, DateConversionError
from ldappolicy.core.types import ErrorType
from ldappolicy.policy.dates import (
    ActiveDirectoryDateConverter,
    EpochDaysDateConverter,
    GeneralizedTimeDateConverter,
    resolve_timezone,
)
from ldappolicy.policy.expiration import (
    NO_WARNING,
    ExpirationCalculator,
    ExpirationStatus,
)


@pytest.fixture
def calculator(policy_config, date_converter, fixed_clock) -> ExpirationCalculator:
    return ExpirationCalculator(
        config=policy_config,
        date_converter=date_converter,
        clock=fixed_clock,
    )


class TestExpirationCalculator:
    """Tests for ExpirationCalculator."""

    def test_expiration_date(self, calculator, make_policy, now):
        policy = make_policy(raw_expiration_date="20260101000000Z", valid_password_days=90)
        expected = datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(days=90)
        assert calculator.expiration_date(policy) == expected

    def test_already_expired(self, calculator, make_policy, days_ago):
        # Stored 100 days ago, valid 90: expired 10 days ago
        policy = make_policy(raw_expiration_date=days_ago(100))
        check = calculator.check(policy)
        assert check.status is ExpirationStatus.EXPIRED
        assert check.days_to_expiration == 0

    def test_expires_exactly_now(self, calculator, make_policy, days_ago):
        policy = make_policy(raw_expiration_date=days_ago(90))
        assert calculator.check(policy).status is ExpirationStatus.EXPIRED

    def test_outside_warning_window(self, calculator, make_policy, days_ago):
        # Expires in 20 days, warning starts 10 days before expiration
        policy = make_policy(raw_expiration_date=days_ago(70), password_warning_days=10)
        check = calculator.check(policy)
        assert check.status is ExpirationStatus.NOT_WARNED
        assert check.days_to_expiration == NO_WARNING
        assert not check.should_warn

    def test_inside_warning_window(self, calculator, make_policy, days_ago):
        # Expires in 25 days, warning window of 30 started 5 days ago
        policy = make_policy(raw_expiration_date=days_ago(65))
        check = calculator.check(policy)
        assert check.status is ExpirationStatus.WARN
        assert check.days_to_expiration == 25
        assert check.should_warn

    def test_warning_starts_exactly_now(self, calculator, make_policy, days_ago):
        policy = make_policy(raw_expiration_date=days_ago(60))
        check = calculator.check(policy)
        assert check.status is ExpirationStatus.WARN
        assert check.days_to_expiration == 30

    def test_days_truncated(self, calculator, make_policy, now):
        stored = now - timedelta(days=65, hours=-12)
        policy = make_policy(raw_expiration_date=stored.strftime("%Y%m%d%H%M%SZ"))
        # 25.5 days left
        assert calculator.days_to_expiration(policy) == 25

    def test_always_warn(self, date_converter, fixed_clock, make_policy, days_ago):
        config = PolicyAwareConfig(always_display_password_expiration_warning=True)
        calculator = ExpirationCalculator(
            config=config, date_converter=date_converter, clock=fixed_clock
        )
        policy = make_policy(raw_expiration_date=days_ago(10))
        check = calculator.check(policy)
        assert check.status is ExpirationStatus.WARN
        assert check.days_to_expiration == 80

    def test_always_warn_does_not_mask_expired(self, date_converter, fixed_clock, make_policy, days_ago):
        config = PolicyAwareConfig(always_display_password_expiration_warning=True)
        calculator = ExpirationCalculator(
            config=config, date_converter=date_converter, clock=fixed_clock
        )
        check = calculator.check(make_policy(raw_expiration_date=days_ago(120)))
        assert check.status is ExpirationStatus.EXPIRED
        assert check.days_to_expiration == 0

    def test_ignore_flag_exempts(self, calculator, make_policy, days_ago):
        policy = make_policy(raw_expiration_date=days_ago(500), ignore_expiration_warning="NEVER")
        check = calculator.check(policy)
        assert check.status is ExpirationStatus.EXEMPT
        assert check.days_to_expiration == NO_WARNING

    def test_unknown_ignore_value_not_exempt(self, calculator, make_policy, days_ago):
        policy = make_policy(raw_expiration_date=days_ago(500), ignore_expiration_warning="maybe")
        assert calculator.check(policy).status is ExpirationStatus.EXPIRED

    def test_blank_ignore_value_not_exempt(self, calculator, make_policy):
        assert not calculator.is_password_set_to_never_expire(
            make_policy(ignore_expiration_warning="   ")
        )

    def test_dont_expire_flag_exempts(self, calculator, make_policy, days_ago):
        policy = make_policy(raw_expiration_date=days_ago(500), user_account_control=512 | 65536)
        assert calculator.check(policy).status is ExpirationStatus.EXEMPT

    def test_exempt_skips_date_conversion(self, calculator, make_policy):
        policy = make_policy(raw_expiration_date="garbage", user_account_control=65536)
        assert calculator.check(policy).status is ExpirationStatus.EXEMPT

    def test_unparseable_date(self, calculator, make_policy):
        with pytest.raises(DateConversionError):
            calculator.check(make_policy(raw_expiration_date="garbage"))

    def test_expiration_beyond_representable_range(self, calculator, make_policy):
        policy = make_policy(raw_expiration_date="99991231235959Z")
        with pytest.raises(DateConversionError):
            calculator.check(policy)

    def test_huge_validity_window(self, calculator, make_policy, days_ago):
        policy = make_policy(
            raw_expiration_date=days_ago(1),
            valid_password_days=timedelta.max.days,
        )
        with pytest.raises(DateConversionError):
            calculator.check(policy)

    def test_huge_warning_window_always_open(self, calculator, make_policy, days_ago):
        policy = make_policy(
            raw_expiration_date=days_ago(65),
            password_warning_days=timedelta.max.days,
        )
        assert calculator.warning_start(calculator.expiration_date(policy), policy) is None
        check = calculator.check(policy)
        assert check.status is ExpirationStatus.WARN
        assert check.days_to_expiration == 25

    def test_evaluate_expired_is_failure(self, calculator, make_policy, days_ago):
        result = calculator.evaluate(make_policy(raw_expiration_date=days_ago(100)))
        assert isinstance(result, Failure)
        classification = result.failure()
        assert classification.type == ErrorType.PASSWORD_EXPIRED
        assert classification.days_to_expiration == 0
        assert classification.attribute == "passwordChangedTime"

    def test_evaluate_warning_is_success(self, calculator, make_policy, days_ago):
        result = calculator.evaluate(make_policy(raw_expiration_date=days_ago(65)))
        assert isinstance(result, Success)
        assert result.unwrap().days_to_expiration == 25

    def test_now_uses_converter_timezone(self, make_policy, fixed_clock):
        tz = ZoneInfo("Pacific/Auckland")
        calculator = ExpirationCalculator(
            config=PolicyAwareConfig(),
            date_converter=GeneralizedTimeDateConverter(timezone=tz),
            clock=fixed_clock,
        )
        assert calculator.now().tzinfo is tz

    def test_default_clock(self, policy_config, date_converter):
        calculator = ExpirationCalculator(config=policy_config, date_converter=date_converter)
        assert calculator.now().tzinfo is timezone.utc


class TestGeneralizedTimeDateConverter:
    """Tests for GeneralizedTimeDateConverter."""

    def test_utc(self):
        converter = GeneralizedTimeDateConverter()
        assert converter.convert("20260131235959Z") == datetime(
            2026, 1, 31, 23, 59, 59, tzinfo=timezone.utc
        )

    def test_fraction(self):
        result = GeneralizedTimeDateConverter().convert("20260131235959.5Z")
        assert result.microsecond == 500000

    def test_offset(self):
        result = GeneralizedTimeDateConverter().convert("20260131120000+0200")
        assert result == datetime(2026, 1, 31, 10, 0, 0, tzinfo=timezone.utc)

    def test_no_designator_uses_converter_zone(self):
        tz = ZoneInfo("Europe/Berlin")
        result = GeneralizedTimeDateConverter(timezone=tz).convert("20260115120000")
        assert result.tzinfo is tz
        assert result.hour == 12

    def test_result_in_converter_zone(self):
        tz = ZoneInfo("America/New_York")
        result = GeneralizedTimeDateConverter(timezone=tz).convert("20260115120000Z")
        assert result.tzinfo is tz
        assert result.hour == 7

    @pytest.mark.parametrize("value", ["", "2026", "yesterday", "20261301000000Z"])
    def test_invalid(self, value):
        with pytest.raises(DateConversionError):
            GeneralizedTimeDateConverter().convert(value)

    @pytest.mark.parametrize("value", ["00010101000000+0100", "99991231235959-0100"])
    def test_out_of_range_after_zone_shift(self, value):
        with pytest.raises(DateConversionError):
            GeneralizedTimeDateConverter().convert(value)


class TestActiveDirectoryDateConverter:
    """Tests for ActiveDirectoryDateConverter."""

    def test_epoch(self):
        # 1970-01-01 in FILETIME ticks
        result = ActiveDirectoryDateConverter().convert("116444736000000000")
        assert result == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_zero_is_filetime_epoch(self):
        assert ActiveDirectoryDateConverter().convert("0").year == 1601

    @pytest.mark.parametrize("value", ["abc", "-1", "9223372036854775807"])
    def test_invalid(self, value):
        with pytest.raises(DateConversionError):
            ActiveDirectoryDateConverter().convert(value)


class TestEpochDaysDateConverter:
    """Tests for EpochDaysDateConverter."""

    def test_days(self):
        result = EpochDaysDateConverter().convert("20000")
        assert result == datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(days=20000)

    def test_invalid(self):
        with pytest.raises(DateConversionError):
            EpochDaysDateConverter().convert("never")

    def test_out_of_range_after_zone_shift(self):
        # 0001-01-01 UTC
        converter = EpochDaysDateConverter(timezone=timezone(timedelta(hours=-1)))
        with pytest.raises(DateConversionError):
            converter.convert("-719162")


class TestResolveTimezone:
    """Tests for resolve_timezone."""

    def test_default_utc(self):
        assert resolve_timezone(None) is timezone.utc
        assert resolve_timezone("UTC") is timezone.utc

    def test_name(self):
        assert resolve_timezone("Europe/Paris") == ZoneInfo("Europe/Paris")

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            resolve_timezone("Mars/Olympus_Mons")
