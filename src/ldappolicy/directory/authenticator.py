"""
LdapPolicy Password Policy Aware Authenticator

Wraps a directory bind with account status and password expiration
checks.

Sequence:
1. Bind via the transport; a failed bind is classified
2. No entry located after bind: authenticated, checks skipped
3. Build the policy configuration; no expiration date: checks skipped
4. Account status checks (disabled, locked, expired, must change)
5. Expiration check: expired rejects, inside the window warns

Each attempt is evaluated independently. The only shared state is the
configuration, which is never modified after construction.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import attrs
import structlog
from returns.result import Failure

from ldappolicy.core.config import PolicyAwareConfig
from ldappolicy.core.exceptions import DirectoryError
from ldappolicy.core.types import (
    Authenticated,
    AuthenticatedWithWarning,
    AuthOutcome,
    Classification,
    Rejected,
)
from ldappolicy.directory.transport import DirectoryTransport
from ldappolicy.policy.configuration import build_policy_configuration
from ldappolicy.policy.dates import DateConverter, GeneralizedTimeDateConverter
from ldappolicy.policy.errors import ErrorClassifier
from ldappolicy.policy.expiration import Clock, ExpirationCalculator
from ldappolicy.policy.status import AccountStatusEvaluator

logger = structlog.get_logger()


@attrs.define
class PolicyAwareAuthenticator:
    """
    Directory authenticator enforcing password policy.

    On construction the transport's attributes_to_return is extended
    with every configured policy attribute, once.

    Example:
        config = PolicyAwareConfig(
            password_expiration_date_attribute="pwdLastSet",
            default_valid_password_days=90,
        )
        auth = PolicyAwareAuthenticator(
            config=config,
            transport=transport,
            date_converter=ActiveDirectoryDateConverter(),
        )
        outcome = auth.authenticate("jdoe", "password")
        if isinstance(outcome, AuthenticatedWithWarning):
            print(f"Password expires in {outcome.days_remaining} day(s)")
    """

    config: PolicyAwareConfig
    transport: DirectoryTransport
    date_converter: DateConverter = attrs.Factory(GeneralizedTimeDateConverter)
    clock: Optional[Clock] = None

    _classifier: ErrorClassifier = attrs.field(init=False)
    _status_evaluator: AccountStatusEvaluator = attrs.field(init=False)
    _expiration_calculator: ExpirationCalculator = attrs.field(init=False)
    _logger: Any = attrs.Factory(lambda: structlog.get_logger())

    def __attrs_post_init__(self) -> None:
        self._classifier = ErrorClassifier(self.config.error_definitions)
        self._status_evaluator = AccountStatusEvaluator(self.config)
        self._expiration_calculator = ExpirationCalculator(
            config=self.config,
            date_converter=self.date_converter,
            clock=self.clock,
        )

        requested = list(self.transport.attributes_to_return or [])
        requested.extend(self.config.policy_attribute_names())
        self.transport.attributes_to_return = requested
        self._logger.debug("attributes_to_return", attributes=requested)

    @property
    def classifier(self) -> ErrorClassifier:
        return self._classifier

    def authenticate(self, identity: str, secret: str) -> AuthOutcome:
        """
        Authenticate identity and apply the password policy.

        Args:
            identity: Login name or DN, passed to the transport as-is
            secret: Password

        Returns:
            Authenticated, AuthenticatedWithWarning or Rejected
        """
        self._logger.info("authenticate_start", identity=identity)

        try:
            outcome = self._authenticate(identity, secret)
        except DirectoryError as e:
            self._logger.warning(
                "directory_error",
                identity=identity,
                error=e.message,
            )
            outcome = self._reject(self._classifier.classify(e.message, identity))

        self._logger.info(
            "authenticate_complete",
            identity=identity,
            success=outcome.success,
            event_id=outcome.event_id,
        )
        return outcome

    def validate_credentials(self, identity: str, secret: str) -> bool:
        """
        Check credentials and policy without surfacing details.

        Returns:
            True if the login would succeed (with or without warning)
        """
        return self.authenticate(identity, secret).success

    def _authenticate(self, identity: str, secret: str) -> AuthOutcome:
        result = self.transport.bind(identity, secret)

        if not result.success:
            self._logger.debug("bind_refused", identity=identity, error=result.message)
            return self._reject(self._classifier.classify(result.message, identity))

        if result.entry is None:
            self._logger.warning(
                "authenticated_entry_not_found",
                identity=identity,
                message="Ignoring password policy checks",
            )
            return Authenticated(identity=identity, policy_checked=False)

        entry = result.entry
        policy = build_policy_configuration(entry.name, entry.attributes, self.config)
        if policy is None:
            return Authenticated(identity=entry.name, policy_checked=False)

        status = self._status_evaluator.evaluate(policy)
        if isinstance(status, Failure):
            return self._reject(status.failure())

        expiration = self._expiration_calculator.evaluate(policy)
        if isinstance(expiration, Failure):
            return self._reject(expiration.failure())

        check = expiration.unwrap()
        if check.should_warn:
            return AuthenticatedWithWarning(
                identity=entry.name,
                days_remaining=check.days_to_expiration,
                policy_url=self.config.password_policy_url,
            )

        return Authenticated(identity=entry.name)

    def _reject(self, classification: Classification) -> Rejected:
        return Rejected(
            classification=classification,
            policy_url=self.config.password_policy_url,
        )


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================


def create_policy_aware_authenticator(
    transport: DirectoryTransport,
    config: Union[PolicyAwareConfig, dict, None] = None,
    date_converter: Optional[DateConverter] = None,
    clock: Optional[Clock] = None,
) -> PolicyAwareAuthenticator:
    """
    Create a policy aware authenticator.

    Args:
        transport: Directory bind collaborator
        config: PolicyAwareConfig, or a mapping for PolicyAwareConfig.from_mapping
        date_converter: Converter for the expiration date attribute
            (GeneralizedTime in UTC if omitted)
        clock: Optional "now" provider

    Returns:
        Configured PolicyAwareAuthenticator

    Raises:
        ConfigurationError: config mapping is invalid
    """
    if config is None:
        config = PolicyAwareConfig()
    elif not isinstance(config, PolicyAwareConfig):
        config = PolicyAwareConfig.from_mapping(config)

    return PolicyAwareAuthenticator(
        config=config,
        transport=transport,
        date_converter=date_converter or GeneralizedTimeDateConverter(),
        clock=clock,
    )
