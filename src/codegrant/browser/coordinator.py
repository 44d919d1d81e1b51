"""Capture an authorization code from a browsing surface.

:class:`BrowserInteractionCoordinator` turns the event-driven
:class:`~codegrant.browser.base.UserBrowserFacade` into one blocking call.
Each call gets its own surface and its own capture listener, which resolves
a one-shot :class:`~concurrent.futures.Future` on the first decisive event:

* **Redirect capture** (any redirect URI except the OOB URN) watches
  ``location_changed``. A location at the redirect URI, or at a path
  below it, that carries ``code`` in its query ends the wait. Other
  navigations, such as the provider's own login and consent pages, are
  ignored.
* **OOB capture** (redirect URI is :data:`~codegrant.models.OAUTH2_OOB_URN`)
  watches ``content_changed``. The provider shows the code to the user,
  typically as ``<title>Success code=...</title>``.

Whatever the outcome, the listener is removed and the surface closed before
the call returns or raises.
"""

from __future__ import annotations

import logging
import re
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Optional
from urllib.parse import parse_qs, unquote

from codegrant.browser.base import BrowserStateListener, UserBrowserFacade
from codegrant.exceptions import (
    AuthorizationTimeoutError,
    CodegrantError,
    NavigationError,
    UserCancelledError,
)
from codegrant.models import AuthorizationRequest

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_OOB_PARAM_RE = re.compile(r"\b(code|error|state)=([^\s&<>\"']+)")


class _CodeCapture(BrowserStateListener):
    """Listener that completes a one-shot future from surface events."""

    def __init__(self, request: AuthorizationRequest) -> None:
        self._request = request
        self._result: Future[str] = Future()
        self._lock = threading.Lock()
        self._detached = False

    def browser_closed(self) -> None:
        self._fail(
            UserCancelledError("Browser closed before an authorization code was received")
        )

    def navigation_failed(self, url: str, reason: str) -> None:
        self._fail(NavigationError(f"Failed to load {url}: {reason}"))

    def wait(self, timeout: Optional[float]) -> str:
        """Block until a code, a failure, or *timeout* seconds pass."""
        try:
            return self._result.result(timeout=timeout)
        except FutureTimeoutError:
            raise AuthorizationTimeoutError(
                f"No authorization code received within {timeout:g} seconds"
            ) from None

    def detach(self) -> None:
        """Ignore all further events."""
        with self._lock:
            self._detached = True
            self._result.cancel()

    def _accept(self, params: dict[str, list[str]]) -> bool:
        """Complete from callback parameters. Returns False if they carry no outcome."""
        error = _first(params, "error")
        if error:
            description = _first(params, "error_description")
            message = f"Authorization failed: {error}"
            if description:
                message += f" - {description}"
            if error == "access_denied":
                self._fail(UserCancelledError(message))
            else:
                self._fail(NavigationError(message))
            return True

        code = _first(params, "code")
        if not code:
            return False

        returned_state = _first(params, "state")
        if returned_state and self._request.state and returned_state != self._request.state:
            self._fail(NavigationError("Authorization response carried a mismatched state"))
            return True

        self._resolve(code)
        return True

    def _resolve(self, code: str) -> None:
        with self._lock:
            if self._detached or self._result.done():
                return
            self._result.set_result(code)

    def _fail(self, exc: CodegrantError) -> None:
        with self._lock:
            if self._detached or self._result.done():
                return
            self._result.set_exception(exc)


class _RedirectCapture(_CodeCapture):
    def location_changed(self, url: str) -> None:
        head, sep, query = url.partition("#")[0].partition("?")
        if not sep:
            # A fully escaped location carries its query escaped too.
            head, _, query = unquote(url).partition("#")[0].partition("?")
        redirect_base = self._request.redirect_uri.partition("?")[0]
        if any(_under(candidate, redirect_base) for candidate in (head, unquote(head))):
            if self._accept(parse_qs(query)):
                return
        logger.debug("Ignoring navigation to %s", head)


class _OobCapture(_CodeCapture):
    def content_changed(self, content: str) -> None:
        title = _TITLE_RE.search(content)
        text = title.group(1) if title else content
        params: dict[str, list[str]] = {}
        for name, value in _OOB_PARAM_RE.findall(text):
            params.setdefault(name, []).append(value)
        if not self._accept(params):
            logger.debug("Page content carries no authorization code")


def _first(params: dict[str, list[str]], name: str) -> Optional[str]:
    values = params.get(name)
    return values[0] if values else None


def _under(location: str, redirect_base: str) -> bool:
    """True if *location* is *redirect_base* or a path below it."""
    if not location.startswith(redirect_base):
        return False
    rest = location[len(redirect_base):]
    return not rest or rest.startswith("/") or redirect_base.endswith("/")


class BrowserInteractionCoordinator:
    """Drive a browsing surface until it yields an authorization code.

    Args:
        browser_factory: Returns a fresh surface for every call, so concurrent
            flows never share a surface or its listeners.
        timeout: Seconds to wait for a code. ``None`` waits until the user
            closes the surface.
    """

    def __init__(
        self,
        browser_factory: Callable[[], UserBrowserFacade],
        timeout: Optional[float] = None,
    ) -> None:
        self._browser_factory = browser_factory
        self._timeout = timeout

    def obtain_authorization_code(self, request: AuthorizationRequest) -> str:
        """Open the authorization page and wait for the provider to hand out a code.

        Args:
            request: The authorization request; its ``redirect_uri`` selects
                redirect or OOB capture.

        Returns:
            The authorization code.

        Raises:
            UserCancelledError: The surface was closed, the user denied
                access, or the timeout expired.
            NavigationError: The surface failed to load a page or the
                provider answered with an error.
        """
        capture: _CodeCapture = (
            _OobCapture(request) if request.is_oob else _RedirectCapture(request)
        )
        browser = self._browser_factory()
        browser.add_state_listener(capture)
        try:
            logger.info(
                "Opening authorization page %s (%s capture)",
                request.authorization_uri,
                "out-of-band" if request.is_oob else "redirect",
            )
            try:
                browser.open(request.url)
            except OSError as exc:
                raise NavigationError(
                    f"Failed to open {request.authorization_uri}: {exc}"
                ) from exc
            code = capture.wait(self._timeout)
        finally:
            browser.remove_state_listener(capture)
            capture.detach()
            browser.close()
        logger.info("Received authorization code")
        return code
