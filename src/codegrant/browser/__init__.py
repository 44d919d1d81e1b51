"""Browsing surfaces and authorization code capture.

Exports:
    :class:`UserBrowserFacade` / :class:`BrowserStateListener` -- the surface
    interface and its event callbacks.
    :class:`BrowserInteractionCoordinator` -- blocks until a surface yields a
    code.
    :class:`SystemBrowserFacade` -- surface backed by the system web browser.
"""

from codegrant.browser.base import BrowserStateListener, UserBrowserFacade
from codegrant.browser.coordinator import BrowserInteractionCoordinator
from codegrant.browser.system import SystemBrowserFacade

__all__ = [
    "BrowserInteractionCoordinator",
    "BrowserStateListener",
    "SystemBrowserFacade",
    "UserBrowserFacade",
]
