"""Canonical Pydantic models shared across all codegrant modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OAuth2Profile` and :class:`ProjectConfig`.

**Flow values** -- ephemeral, built and consumed during one authorization run:
    :class:`ValidatedParameters`, :class:`AuthorizationRequest`, and
    :class:`TokenResponse`.

All models use Pydantic v2. Flow values are frozen so that no stage of the
flow can alter what an earlier stage produced.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

OAUTH2_OOB_URN = "urn:ietf:wg:oauth:2.0:oob"
"""Reserved redirect URI selecting the out-of-band (title scraping) strategy."""


# --- Configuration models ---


class OAuth2Profile(BaseModel):
    """A named OAuth2 client configuration and the token it last obtained.

    The three URI fields and the client credentials may contain property
    placeholders such as ``${#Project#authUrl}``; they are expanded just
    before validation and the expanded values are never written back. The only field the flow
    mutates is :attr:`access_token`.

    Example::

        OAuth2Profile(
            name="github",
            authorization_uri="https://github.com/login/oauth/authorize",
            access_token_uri="https://github.com/login/oauth/access_token",
            redirect_uri="http://localhost:8080/callback",
            client_id="Iv1.abc",
            client_secret="${#Env#GITHUB_CLIENT_SECRET}",
        )
    """

    name: str = Field(default="default", description="Profile name (file stem on disk)")
    authorization_uri: str = ""
    access_token_uri: str = ""
    redirect_uri: str = ""
    client_id: str = ""
    client_secret: str = ""
    scope: Optional[str] = Field(
        default=None, description="Space-separated scopes passed through to the provider"
    )
    access_token: str = Field(default="", description="Result of the last successful flow")


class ProjectConfig(BaseModel):
    """Project-level settings shared by all profiles.

    ``properties`` backs ``${#Project#name}`` placeholders in profile URIs.
    """

    properties: dict[str, str] = Field(default_factory=dict)
    default_profile: Optional[str] = None
    browser_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Seconds to wait for an authorization code; None waits forever",
    )


# --- Flow values ---


class ValidatedParameters(BaseModel):
    """Profile values that passed :class:`~codegrant.oauth2.validator.ParameterValidator`."""

    model_config = ConfigDict(frozen=True)

    authorization_uri: str
    access_token_uri: str
    redirect_uri: str
    client_id: str
    client_secret: str
    scope: Optional[str] = None

    @property
    def is_oob(self) -> bool:
        """Whether the out-of-band strategy is selected."""
        return self.redirect_uri == OAUTH2_OOB_URN


class AuthorizationRequest(BaseModel):
    """The authorization endpoint call the browsing surface is pointed at."""

    model_config = ConfigDict(frozen=True)

    authorization_uri: str
    client_id: str
    redirect_uri: str
    response_type: str = "code"
    scope: Optional[str] = None
    state: Optional[str] = None

    @property
    def is_oob(self) -> bool:
        return self.redirect_uri == OAUTH2_OOB_URN

    @property
    def url(self) -> str:
        """Full authorization URL with the grant parameters in its query string."""
        params: dict[str, str] = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": self.response_type,
        }
        if self.scope:
            params["scope"] = self.scope
        if self.state:
            params["state"] = self.state
        separator = "&" if "?" in self.authorization_uri else "?"
        return f"{self.authorization_uri}{separator}{urlencode(params)}"


class TokenResponse(BaseModel):
    """Parsed token endpoint response. Unknown fields are kept in ``model_extra``."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
