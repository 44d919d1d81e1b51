"""Upfront validation of OAuth2 profile parameters.

Runs on already-expanded values and performs no I/O, so a broken profile is
rejected before a browser window opens or a request is sent.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from codegrant.exceptions import InvalidParametersError
from codegrant.models import OAUTH2_OOB_URN, ValidatedParameters

_HTTP_SCHEMES = ("http", "https")


def is_http_uri(value: str) -> bool:
    """Return True if *value* is an absolute http(s) URI with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme.lower() in _HTTP_SCHEMES and bool(parsed.netloc)


class ParameterValidator:
    """Check the five profile fields the authorization code grant depends on."""

    def validate(
        self,
        authorization_uri: str,
        access_token_uri: str,
        redirect_uri: str,
        client_id: str,
        client_secret: str,
        scope: Optional[str] = None,
    ) -> ValidatedParameters:
        """Validate expanded profile values.

        Args:
            authorization_uri: Provider authorization endpoint.
            access_token_uri: Provider token endpoint.
            redirect_uri: Registered redirect URI, or the OOB URN.
            client_id: OAuth2 client identifier.
            client_secret: OAuth2 client secret.
            scope: Optional scope string, passed through untouched.

        Returns:
            The values wrapped in a :class:`~codegrant.models.ValidatedParameters`.

        Raises:
            InvalidParametersError: Listing every violated rule.
        """
        problems: list[tuple[str, str]] = []

        problems.extend(self._check_endpoint("authorization_uri", authorization_uri))
        problems.extend(self._check_endpoint("access_token_uri", access_token_uri))
        if redirect_uri != OAUTH2_OOB_URN and not is_http_uri(redirect_uri):
            problems.append(
                (
                    "redirect_uri",
                    f"redirect_uri must be {OAUTH2_OOB_URN} or an http(s) URI, "
                    f"got '{redirect_uri}'",
                )
            )
        if not client_id:
            problems.append(("client_id", "client_id must not be empty"))
        if not client_secret:
            problems.append(("client_secret", "client_secret must not be empty"))

        if problems:
            raise InvalidParametersError(problems)

        return ValidatedParameters(
            authorization_uri=authorization_uri,
            access_token_uri=access_token_uri,
            redirect_uri=redirect_uri,
            client_id=client_id,
            client_secret=client_secret,
            scope=scope or None,
        )

    def _check_endpoint(self, field: str, value: str) -> list[tuple[str, str]]:
        if value == OAUTH2_OOB_URN:
            return [(field, f"{field} must not be the out-of-band URN")]
        if not is_http_uri(value):
            return [(field, f"{field} must be an http(s) URI, got '{value}'")]
        return []
