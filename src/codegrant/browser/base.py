"""Abstract browsing surface used to collect user consent.

This module defines the two foundational types of the browser subsystem:

- :class:`BrowserStateListener` -- receives navigation and content events
  from a surface. Every callback has a no-op default so listeners only
  override what they observe.
- :class:`UserBrowserFacade` -- the capability interface every surface
  implements (open, close, listen).

To support a new browser technology, subclass :class:`UserBrowserFacade`
and report what the user sees through the registered listeners. Events may
be delivered from any thread, including synchronously from inside
:meth:`~UserBrowserFacade.open`.

See Also:
    :mod:`codegrant.browser.coordinator` for the consumer of these events.
    :mod:`codegrant.browser.system` for the system web browser surface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BrowserStateListener:
    """Callback interface for browsing surface events."""

    def location_changed(self, url: str) -> None:
        """The surface navigated to *url*."""

    def content_changed(self, content: str) -> None:
        """The page content (or title) is now *content*."""

    def browser_closed(self) -> None:
        """The surface was closed by the user or operator."""

    def navigation_failed(self, url: str, reason: str) -> None:
        """Loading *url* failed at the transport level."""


class UserBrowserFacade(ABC):
    """Abstract base class for browsing surfaces.

    A surface instance serves one authorization attempt: it is opened once,
    observed through listeners, and closed. :meth:`close` must be safe to
    call on a surface the user already closed.
    """

    @abstractmethod
    def open(self, url: str) -> None:
        """Show *url* to the user."""
        ...

    @abstractmethod
    def add_state_listener(self, listener: BrowserStateListener) -> None:
        ...

    @abstractmethod
    def remove_state_listener(self, listener: BrowserStateListener) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        """Dispose of the surface and any resources it holds."""
        ...
