"""
LdapPolicy Account Status Evaluation

Decides whether an authenticated account may log in at all.

Checks run in a fixed order and stop at the first violation:

    OK -> DISABLED_BY_FLAG -> LOCKED_BY_FLAG -> EXPIRED_BY_FLAG
       -> DISABLED_BY_ATTR -> LOCKED_BY_ATTR -> MUST_CHANGE_BY_ATTR

Account control bits take precedence over the boolean policy
attributes.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple

import attrs
import structlog
from returns.result import Failure, Result, Success

from ldappolicy.core.types import (
    AccountControlFlag,
    Classification,
    ErrorType,
    PolicyConfiguration,
)

if TYPE_CHECKING:
    from ldappolicy.core.config import PolicyAwareConfig

logger = structlog.get_logger()


class AccountStatus(Enum):
    """Outcome of the account status checks."""

    OK = auto()
    DISABLED_BY_FLAG = auto()
    LOCKED_BY_FLAG = auto()
    EXPIRED_BY_FLAG = auto()
    DISABLED_BY_ATTR = auto()
    LOCKED_BY_ATTR = auto()
    MUST_CHANGE_BY_ATTR = auto()

    @property
    def error_type(self) -> Optional[ErrorType]:
        """Classification type for a violation (None for OK)."""
        types = {
            AccountStatus.DISABLED_BY_FLAG: ErrorType.ACCOUNT_DISABLED,
            AccountStatus.LOCKED_BY_FLAG: ErrorType.ACCOUNT_LOCKED,
            AccountStatus.EXPIRED_BY_FLAG: ErrorType.ACCOUNT_PASSWORD_EXPIRED,
            AccountStatus.DISABLED_BY_ATTR: ErrorType.ACCOUNT_DISABLED,
            AccountStatus.LOCKED_BY_ATTR: ErrorType.ACCOUNT_LOCKED,
            AccountStatus.MUST_CHANGE_BY_ATTR: ErrorType.ACCOUNT_MUST_CHANGE_PASSWORD,
        }
        return types.get(self)


# (status, predicate, source attribute resolver, message template)
StatusCheck = Tuple[
    AccountStatus,
    Callable[[PolicyConfiguration], bool],
    Callable[[Any], Optional[str]],
    str,
]


def _flag_check(flag: AccountControlFlag) -> Callable[[PolicyConfiguration], bool]:
    return lambda policy: flag.is_set(policy.user_account_control)


def _account_control_attribute(config: PolicyAwareConfig) -> Optional[str]:
    return config.user_account_control_attribute


@attrs.define(frozen=True, slots=True)
class AccountStatusEvaluator:
    """
    Fail-fast account status checks.

    Example:
        evaluator = AccountStatusEvaluator(config)
        result = evaluator.evaluate(policy)
        if isinstance(result, Failure):
            print(result.failure().type)
    """

    config: PolicyAwareConfig

    def checks(self) -> List[StatusCheck]:
        """The ordered check table."""
        return [
            (
                AccountStatus.DISABLED_BY_FLAG,
                _flag_check(AccountControlFlag.ACCOUNT_DISABLED),
                _account_control_attribute,
                "User account control flag is set. Account {identity} is disabled",
            ),
            (
                AccountStatus.LOCKED_BY_FLAG,
                _flag_check(AccountControlFlag.LOCKOUT),
                _account_control_attribute,
                "User account control flag is set. Account {identity} is locked",
            ),
            (
                AccountStatus.EXPIRED_BY_FLAG,
                _flag_check(AccountControlFlag.PASSWORD_EXPIRED),
                _account_control_attribute,
                "User account control flag is set. Account {identity} password has expired",
            ),
            (
                AccountStatus.DISABLED_BY_ATTR,
                lambda policy: policy.account_disabled,
                lambda c: c.account_disabled_attribute,
                "Password policy attribute {attribute} is set. Account {identity} is disabled",
            ),
            (
                AccountStatus.LOCKED_BY_ATTR,
                lambda policy: policy.account_locked,
                lambda c: c.account_locked_attribute,
                "Password policy attribute {attribute} is set. Account {identity} is locked",
            ),
            (
                AccountStatus.MUST_CHANGE_BY_ATTR,
                lambda policy: policy.must_change_password,
                lambda c: c.account_must_change_password_attribute,
                "Password policy attribute {attribute} is set. "
                "Account {identity} must change its password",
            ),
        ]

    def status_of(self, policy: PolicyConfiguration) -> Tuple[AccountStatus, Optional[str], str]:
        """
        Run the checks and report the first matching status.

        Returns:
            (status, triggering attribute name, diagnostic message)
        """
        for status, predicate, attribute_of, template in self.checks():
            if predicate(policy):
                attribute = attribute_of(self.config)
                message = template.format(identity=policy.identity, attribute=attribute)
                return status, attribute, message
        return AccountStatus.OK, None, ""

    def evaluate(
        self, policy: PolicyConfiguration
    ) -> Result[PolicyConfiguration, Classification]:
        """
        Evaluate account status.

        Returns:
            Success(policy) if the account may proceed
            Failure(classification) on the first violation
        """
        if AccountControlFlag.PASSWD_NOTREQD.is_set(policy.user_account_control):
            logger.info("password_not_required_flag", identity=policy.identity)

        status, attribute, message = self.status_of(policy)
        if status is AccountStatus.OK:
            return Success(policy)

        logger.warning(
            "account_status_violation",
            identity=policy.identity,
            status=status.name,
            attribute=attribute,
            flags=[f.name for f in AccountControlFlag.flags_in(policy.user_account_control)],
        )
        return Failure(
            Classification(
                type=status.error_type,
                message=message,
                identity=policy.identity,
                attribute=attribute,
            )
        )
