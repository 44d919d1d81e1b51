"""OAuth2 Authorization Code flow orchestration.

:class:`OAuth2Flow` sequences one authorization run::

    IDLE -> VALIDATING -> AWAITING_AUTHORIZATION -> CODE_RECEIVED
         -> EXCHANGING_TOKEN -> COMPLETED

Any failure moves the run to ``FAILED`` and re-raises. The profile is
written exactly once, after a non-empty token has been obtained, so a
failed run leaves the previous ``access_token`` in place.

The run state lives in the call, not on the flow object. Progress is
reported through the optional ``on_transition`` callback and the module
logger.
"""

from __future__ import annotations

import enum
import logging
import secrets
from typing import Callable, Optional

from codegrant.browser.base import UserBrowserFacade
from codegrant.browser.coordinator import BrowserInteractionCoordinator
from codegrant.exceptions import TokenExchangeError
from codegrant.expansion import ProjectPropertyExpander, PropertyExpander
from codegrant.models import AuthorizationRequest, OAuth2Profile
from codegrant.oauth2.token_client import TokenExchangeClient
from codegrant.oauth2.validator import ParameterValidator

logger = logging.getLogger(__name__)


class FlowState(str, enum.Enum):
    """Stages of one authorization run."""

    IDLE = "idle"
    VALIDATING = "validating"
    AWAITING_AUTHORIZATION = "awaiting_authorization"
    CODE_RECEIVED = "code_received"
    EXCHANGING_TOKEN = "exchanging_token"
    COMPLETED = "completed"
    FAILED = "failed"


class OAuth2Flow:
    """Obtain an access token for a profile through the user's browser.

    Args:
        browser_factory: Returns a fresh browsing surface per run.
        token_client: Sends the token request. Defaults to a
            :class:`~codegrant.oauth2.token_client.TokenExchangeClient`.
        expander: Resolves placeholders in the profile URIs and client
            credentials. Defaults to an
            expander with no project properties (environment only).
        validator: Checks the expanded parameters.
        timeout: Seconds to wait for the user to authorize. ``None`` waits
            until the browser is closed.
        on_transition: Called with each :class:`FlowState` the run enters.

    Example::

        flow = OAuth2Flow(lambda: SystemBrowserFacade(), timeout=300)
        flow.request_access_token(profile)
        save_profile(profile)
    """

    def __init__(
        self,
        browser_factory: Callable[[], UserBrowserFacade],
        token_client: Optional[TokenExchangeClient] = None,
        expander: Optional[PropertyExpander] = None,
        validator: Optional[ParameterValidator] = None,
        timeout: Optional[float] = None,
        on_transition: Optional[Callable[[FlowState], None]] = None,
    ) -> None:
        self._coordinator = BrowserInteractionCoordinator(browser_factory, timeout)
        self._token_client = token_client or TokenExchangeClient()
        self._expander = expander or ProjectPropertyExpander()
        self._validator = validator or ParameterValidator()
        self._on_transition = on_transition

    def request_access_token(self, profile: OAuth2Profile) -> str:
        """Run the authorization code grant and store the token on *profile*.

        Args:
            profile: The profile to authorize. Only ``access_token`` is
                modified, and only on success.

        Returns:
            The new access token.

        Raises:
            InvalidParametersError: The expanded profile is invalid. No
                browser or network activity took place.
            ConfigError: A placeholder in the profile could not be resolved.
            UserCancelledError: The user closed the browser, denied access,
                or the timeout expired.
            NavigationError: The browser failed to load a page.
            TokenExchangeError: The token endpoint failed or returned no token.
        """
        state = FlowState.IDLE
        self._enter(state, profile)
        try:
            state = FlowState.VALIDATING
            self._enter(state, profile)
            params = self._validator.validate(
                authorization_uri=self._expander.expand(profile.authorization_uri),
                access_token_uri=self._expander.expand(profile.access_token_uri),
                redirect_uri=self._expander.expand(profile.redirect_uri),
                client_id=self._expander.expand(profile.client_id),
                client_secret=self._expander.expand(profile.client_secret),
                scope=profile.scope,
            )

            state = FlowState.AWAITING_AUTHORIZATION
            self._enter(state, profile)
            request = AuthorizationRequest(
                authorization_uri=params.authorization_uri,
                client_id=params.client_id,
                redirect_uri=params.redirect_uri,
                scope=params.scope,
                state=secrets.token_urlsafe(16),
            )
            code = self._coordinator.obtain_authorization_code(request)

            state = FlowState.CODE_RECEIVED
            self._enter(state, profile)

            state = FlowState.EXCHANGING_TOKEN
            self._enter(state, profile)
            access_token = self._token_client.exchange_code_for_token(
                params.access_token_uri,
                code,
                params.client_id,
                params.client_secret,
                redirect_uri=params.redirect_uri,
            )
            if not access_token:
                raise TokenExchangeError("Token endpoint returned an empty access token")
        except Exception as exc:
            logger.debug(
                "OAuth2 flow for profile '%s' failed while %s: %s",
                profile.name,
                state.value.replace("_", " "),
                exc,
            )
            self._enter(FlowState.FAILED, profile)
            raise

        profile.access_token = access_token
        self._enter(FlowState.COMPLETED, profile)
        return access_token

    def _enter(self, state: FlowState, profile: OAuth2Profile) -> None:
        logger.debug("Profile '%s': %s", profile.name, state.value)
        if self._on_transition is not None:
            self._on_transition(state)
