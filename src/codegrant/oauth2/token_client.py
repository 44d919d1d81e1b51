"""Exchange an authorization code for an access token.

:class:`TokenExchangeClient` sends one ``grant_type=authorization_code``
request to the provider's token endpoint with the client credentials in the
form body, and parses the answer. Providers differ in what they send back:
most answer JSON, some (GitHub without an ``Accept`` match, older Facebook
endpoints) answer ``application/x-www-form-urlencoded`` or ``text/plain``;
both are accepted.

No retries happen here. An authorization code is single-use, so a failed
exchange has to restart from authorization.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import parse_qsl

import httpx
from pydantic import ValidationError

from codegrant.exceptions import TokenExchangeError
from codegrant.models import TokenResponse

logger = logging.getLogger(__name__)

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "text/plain")


class TokenExchangeClient:
    """Send the token request for the authorization code grant.

    Args:
        timeout: Seconds before the HTTP request is abandoned.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    def exchange_code_for_token(
        self,
        access_token_uri: str,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: Optional[str] = None,
    ) -> str:
        """Exchange *code* and return the bearer access token string.

        Raises:
            TokenExchangeError: See :meth:`request_token`.
        """
        return self.request_token(
            access_token_uri, code, client_id, client_secret, redirect_uri
        ).access_token

    def request_token(
        self,
        access_token_uri: str,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: Optional[str] = None,
    ) -> TokenResponse:
        """Exchange *code* and return the full parsed token response.

        Args:
            access_token_uri: Provider token endpoint.
            code: The authorization code captured from the browser.
            client_id: OAuth2 client identifier.
            client_secret: OAuth2 client secret.
            redirect_uri: Redirect URI sent with the authorization request.
                Included in the body when given, as :rfc:`6749` section 4.1.3
                requires a matching value.

        Returns:
            The parsed :class:`~codegrant.models.TokenResponse`.

        Raises:
            TokenExchangeError: On transport errors, non-2xx responses,
                unparseable bodies, or a missing ``access_token``.
        """
        data: dict[str, str] = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
        }
        if redirect_uri:
            data["redirect_uri"] = redirect_uri

        logger.info("Exchanging authorization code at %s", access_token_uri)
        try:
            response = httpx.post(
                access_token_uri,
                data=data,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TokenExchangeError(
                f"Token exchange failed with status {exc.response.status_code}: "
                f"{_describe_error(exc.response)}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TokenExchangeError(f"Token exchange failed: {exc}") from exc

        token_data = _parse_body(response)

        if "error" in token_data:
            # Some providers report a rejected code with a 200 status.
            desc = token_data.get("error_description") or token_data["error"]
            raise TokenExchangeError(
                f"Token endpoint rejected the code: {desc}",
                status_code=response.status_code,
            )
        if not token_data.get("access_token"):
            raise TokenExchangeError(
                "Token response missing 'access_token' field",
                status_code=response.status_code,
            )

        try:
            token = TokenResponse.model_validate(token_data)
        except ValidationError as exc:
            raise TokenExchangeError(
                f"Malformed token response: {exc}", status_code=response.status_code
            ) from exc

        logger.info(
            "Token endpoint issued a %s token", token.token_type or "bearer"
        )
        return token


def _parse_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a token response body as JSON or form-encoded pairs."""
    content_type = response.headers.get("content-type", "").lower()
    if any(ct in content_type for ct in _FORM_CONTENT_TYPES):
        return dict(parse_qsl(response.text))

    try:
        body = response.json()
    except ValueError as exc:
        raise TokenExchangeError(
            "Token response is not valid JSON", status_code=response.status_code
        ) from exc
    if not isinstance(body, dict):
        raise TokenExchangeError(
            "Token response is not a JSON object", status_code=response.status_code
        )
    return body


def _describe_error(response: httpx.Response) -> str:
    """Best-effort ``error: description`` from an OAuth2 error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "error" in body:
        desc = body.get("error_description")
        return f"{body['error']}: {desc}" if desc else str(body["error"])
    return response.text
