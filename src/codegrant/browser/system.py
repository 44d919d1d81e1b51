"""Browsing surface backed by the user's system web browser.

The system browser cannot be observed directly, so
:class:`SystemBrowserFacade` reconstructs the events the coordinator needs:

* **Loopback redirect URIs** (``http://localhost:PORT/...``,
  ``http://127.0.0.1:PORT/...``): a temporary local HTTP server listens on
  the redirect port and reports every request it receives as a
  ``location_changed`` event.
* **OOB and remote redirect URIs**: after opening the page, a daemon
  thread asks the user to paste what the browser shows -- the page title
  for OOB, the final URL otherwise. The answer is reported as
  ``content_changed`` or ``location_changed``. An empty answer reports the
  browser as closed.

Both modes require an interactive terminal for the prompt fallback.
"""

from __future__ import annotations

import logging
import sys
import threading
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Optional
from urllib.parse import parse_qs, urlsplit

import typer

from codegrant.browser.base import BrowserStateListener, UserBrowserFacade
from codegrant.models import OAUTH2_OOB_URN

logger = logging.getLogger(__name__)

_LOOPBACK_HOSTS = ("localhost", "127.0.0.1")

_SUCCESS_PAGE = (
    "<html><head><title>Authorization received</title></head><body>"
    "<h2>Authorization received. You can close this window "
    "and return to the terminal.</h2></body></html>"
)


def _prompt(message: str) -> str:
    return typer.prompt(message, default="", show_default=False)


class SystemBrowserFacade(UserBrowserFacade):
    """Open the authorization page in the system browser.

    Args:
        prompt: Asks the user for text. Defaults to :func:`typer.prompt`.
        open_browser: Opens a URL. Defaults to :func:`webbrowser.open`.
    """

    def __init__(
        self,
        prompt: Optional[Callable[[str], str]] = None,
        open_browser: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self._prompt = prompt or _prompt
        self._open_browser = open_browser or webbrowser.open
        self._listeners: list[BrowserStateListener] = []
        self._lock = threading.Lock()
        self._server: Optional[HTTPServer] = None
        self._prompt_thread: Optional[threading.Thread] = None
        self._closed = False

    # ------------------------------------------------------------------
    # UserBrowserFacade
    # ------------------------------------------------------------------

    def add_state_listener(self, listener: BrowserStateListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_state_listener(self, listener: BrowserStateListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def open(self, url: str) -> None:
        """Open *url* and start observing the redirect.

        Returns immediately. The redirect is observed by a loopback server
        or by a paste prompt running on a daemon thread.
        """
        redirect_uri = _redirect_uri_of(url)
        loopback = redirect_uri is not None and _is_loopback(redirect_uri)

        if loopback:
            assert redirect_uri is not None
            try:
                self._start_server(redirect_uri)
            except OSError as exc:
                logger.warning("Cannot listen for redirect %s: %s", redirect_uri, exc)
                self._emit(lambda listener: listener.navigation_failed(redirect_uri, str(exc)))
                return

        sys.stderr.write(f"\nOpening your browser at:\n  {url}\n\n")
        sys.stderr.flush()

        def _launch() -> None:
            if not self._open_browser(url):
                logger.info("No browser could be launched; open the URL manually")

        threading.Thread(target=_launch, daemon=True).start()

        if loopback:
            sys.stderr.write("Waiting for the authorization redirect...\n")
            sys.stderr.flush()
            return

        # The prompt may outlive the caller's timeout; a late answer reaches
        # no listener once the surface is closed.
        self._prompt_thread = threading.Thread(
            target=self._ask_for_result,
            args=(redirect_uri == OAUTH2_OOB_URN,),
            daemon=True,
        )
        self._prompt_thread.start()

    def close(self) -> None:
        """Stop the loopback server, if any. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            server, self._server = self._server, None
        if server is not None:
            server.shutdown()
            server.server_close()
            logger.debug("Stopped redirect listener")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ask_for_result(self, oob: bool) -> None:
        if oob:
            answer = self._ask("Paste the code or page title shown by the provider")
            if answer is None:
                return
            if "code=" not in answer and "error=" not in answer:
                answer = f"code={answer}"
            self._emit(lambda listener: listener.content_changed(answer))
        else:
            answer = self._ask("Paste the URL your browser was redirected to")
            if answer is None:
                return
            self._emit(lambda listener: listener.location_changed(answer))

    def _ask(self, message: str) -> Optional[str]:
        """Prompt the user; report the browser as closed on an empty answer."""
        try:
            answer = self._prompt(message).strip()
        except (EOFError, KeyboardInterrupt, typer.Abort):
            answer = ""
        if not answer:
            self._emit(lambda listener: listener.browser_closed())
            return None
        return answer

    def _emit(self, event: Callable[[BrowserStateListener], None]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            event(listener)

    def _start_server(self, redirect_uri: str) -> None:
        parts = urlsplit(redirect_uri)
        host = "127.0.0.1" if parts.hostname == "localhost" else parts.hostname
        port = parts.port if parts.port is not None else 80
        base = f"{parts.scheme}://{parts.netloc}"
        emit = self._emit

        class RedirectHandler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:
                location = f"{base}{self.path}"
                emit(lambda listener: listener.location_changed(location))
                body = _SUCCESS_PAGE.encode("utf-8")
                self.send_response(200)
                self.send_header("Content-Type", "text/html; charset=utf-8")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def log_message(self, format: str, *args: Any) -> None:
                pass

        server = HTTPServer((host, port), RedirectHandler)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        with self._lock:
            self._server = server
        thread.start()
        logger.debug("Listening for redirect on %s:%d", host, server.server_address[1])

    @property
    def server_port(self) -> Optional[int]:
        """Port of the running loopback server, or ``None``."""
        server = self._server
        return server.server_address[1] if server is not None else None


def _redirect_uri_of(url: str) -> Optional[str]:
    values = parse_qs(urlsplit(url).query).get("redirect_uri")
    return values[0] if values else None


def _is_loopback(redirect_uri: str) -> bool:
    parts = urlsplit(redirect_uri)
    return parts.scheme == "http" and parts.hostname in _LOOPBACK_HOSTS
