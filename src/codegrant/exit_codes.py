"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~codegrant.exceptions.CodegrantError` subclass.
Shell wrappers can inspect the exit code to tell a rejected configuration
from a cancelled login without parsing stderr.

Example::

    $ codegrant token request github
    $ echo $?
    130   # EXIT_CANCELLED -- the browser was closed before a code arrived
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_PARAMETERS = 2
"""The profile or the command line carries invalid parameters."""

EXIT_TOKEN_EXCHANGE_FAILURE = 3
"""The token endpoint rejected the authorization code or answered garbage."""

EXIT_NAVIGATION_ERROR = 6
"""The browsing surface failed to load or navigate."""

EXIT_CANCELLED = 130
"""The user closed the browser (or the wait timed out) before a code arrived."""
