"""Shared test fixtures for codegrant.

Provides isolated config environments, a ready-to-authorize profile, and
scripted browsing surfaces that stand in for a real browser. These fixtures
are automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlsplit

import pytest

from codegrant.browser.base import BrowserStateListener, UserBrowserFacade
from codegrant.models import OAuth2Profile
from codegrant.output import reset_output


AUTHORIZATION_CODE = "some_code"
ACCESS_TOKEN = "expected_access_token"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Reset the global OutputManager and the ``codegrant`` logger after every test.

    CLI tests install a fresh OutputManager and a RichHandler bound to the
    streams CliRunner redirects; both go stale once the test finishes.
    """
    yield
    reset_output()
    logger = logging.getLogger("codegrant")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Scripted browsing surfaces
# ---------------------------------------------------------------------------


class RecordingBrowser(UserBrowserFacade):
    """Browsing surface test double that runs a script when opened.

    Every interaction is appended to :attr:`log` so tests can assert on
    ordering, e.g. that the surface was closed after the code arrived.
    """

    def __init__(self, script: Optional[Callable[["RecordingBrowser", str], None]] = None):
        self.script = script
        self.listeners: list[BrowserStateListener] = []
        self.opened_urls: list[str] = []
        self.close_count = 0
        self.listeners_at_close: Optional[int] = None
        self.log: list[str] = []

    def open(self, url: str) -> None:
        self.opened_urls.append(url)
        self.log.append("open")
        if self.script is not None:
            self.script(self, url)

    def add_state_listener(self, listener: BrowserStateListener) -> None:
        self.listeners.append(listener)

    def remove_state_listener(self, listener: BrowserStateListener) -> None:
        self.listeners.remove(listener)

    def close(self) -> None:
        self.close_count += 1
        self.listeners_at_close = len(self.listeners)
        self.log.append("close")

    # Event helpers used by scripts

    def navigate(self, url: str) -> None:
        self.log.append(f"location:{url}")
        for listener in list(self.listeners):
            listener.location_changed(url)

    def show(self, content: str) -> None:
        self.log.append(f"content:{content}")
        for listener in list(self.listeners):
            listener.content_changed(content)

    def user_closes(self) -> None:
        self.log.append("user-closed")
        for listener in list(self.listeners):
            listener.browser_closed()

    def fail(self, url: str, reason: str) -> None:
        self.log.append(f"failed:{url}")
        for listener in list(self.listeners):
            listener.navigation_failed(url, reason)


def provider_script(code: str = AUTHORIZATION_CODE) -> Callable[[RecordingBrowser, str], None]:
    """Script that behaves like an OAuth2 provider granting consent immediately.

    For a regular redirect URI it navigates to ``<redirect_uri>?code=...``
    using the redirect URI exactly as it appears (percent-encoded) in the
    authorization URL's query. For the OOB URN it shows the code in the
    page title instead.
    """

    def _script(browser: RecordingBrowser, url: str) -> None:
        query = urlsplit(url).query
        if "redirect_uri=urn%3Aietf%3Awg%3Aoauth%3A2.0%3Aoob" not in query:
            for parameter in query.split("&"):
                prefix = "redirect_uri="
                if parameter.startswith(prefix):
                    redirect_uri = parameter[len(prefix):]
                    browser.navigate(f"{redirect_uri}?code={code}")
        else:
            browser.show(f"<TITLE>code={code}</TITLE>")

    return _script


@pytest.fixture
def make_browser() -> Callable[..., RecordingBrowser]:
    """Factory for :class:`RecordingBrowser` instances with a custom script."""
    return RecordingBrowser


@pytest.fixture
def provider() -> Callable[..., Callable[[RecordingBrowser, str], None]]:
    """The :func:`provider_script` factory, for scripts with a custom code."""
    return provider_script


@pytest.fixture
def stub_browser() -> RecordingBrowser:
    """A surface that grants consent as soon as it is opened."""
    return RecordingBrowser(provider_script())


# ---------------------------------------------------------------------------
# Profile fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def profile() -> OAuth2Profile:
    """A valid profile using redirect capture on a local endpoint."""
    return OAuth2Profile(
        name="test",
        authorization_uri="http://localhost:8080/authorize",
        access_token_uri="http://localhost:8080/accesstoken",
        redirect_uri="http://localhost:8080/redirect",
        client_id="ClientId",
        client_secret="ClientSecret",
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of tmp_path,
    forces XDG path resolution, clears CODEGRANT_* variables, and changes
    the working directory to tmp_path.
    """
    monkeypatch.setattr("codegrant.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("CODEGRANT_PROFILE", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
