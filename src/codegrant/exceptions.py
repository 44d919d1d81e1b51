"""Exception hierarchy for codegrant.

All exceptions inherit from :class:`CodegrantError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`codegrant.exit_codes`.
The top-level error handler in :func:`codegrant.app.main` catches
``CodegrantError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    CodegrantError (exit 1)
    +-- InvalidParametersError      (exit 2)
    +-- UserCancelledError          (exit 130)
    |   +-- AuthorizationTimeoutError
    +-- NavigationError             (exit 6)
    +-- TokenExchangeError          (exit 3)
    +-- ConfigError                 (exit 1)
"""

from __future__ import annotations

from codegrant.exit_codes import (
    EXIT_CANCELLED,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_PARAMETERS,
    EXIT_NAVIGATION_ERROR,
    EXIT_TOKEN_EXCHANGE_FAILURE,
)


class CodegrantError(Exception):
    """Base exception for all codegrant errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`codegrant.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidParametersError(CodegrantError):
    """Raised when a profile fails validation, before any browser or network activity.

    Args:
        problems: ``(field, message)`` pairs, one per violated rule.
            :attr:`field` names the first offending field.
    """

    exit_code = EXIT_INVALID_PARAMETERS

    def __init__(self, problems: list[tuple[str, str]]):
        self.problems = list(problems)
        self.field = self.problems[0][0] if self.problems else None
        super().__init__("; ".join(message for _, message in self.problems))


class UserCancelledError(CodegrantError):
    """Raised when the browsing surface closes without producing a code."""

    exit_code = EXIT_CANCELLED


class AuthorizationTimeoutError(UserCancelledError):
    """Raised when no code arrives within the caller-supplied timeout."""


class NavigationError(CodegrantError):
    """Raised when the browsing surface fails to load or navigate."""

    exit_code = EXIT_NAVIGATION_ERROR


class TokenExchangeError(CodegrantError):
    """Raised when the token endpoint fails or returns a malformed response.

    The underlying cause (an :mod:`httpx` error, a JSON decoding error) is
    chained via ``raise ... from``.

    Args:
        message: Human-readable error description.
        status_code: HTTP status of the token response, when one was received.
    """

    exit_code = EXIT_TOKEN_EXCHANGE_FAILURE

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigError(CodegrantError):
    """Raised for configuration problems (missing profiles, invalid JSON, unknown properties)."""

    exit_code = EXIT_GENERIC_FAILURE
