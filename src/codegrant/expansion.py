"""Property expansion for profile strings.

Profile URIs and secrets may reference named values instead of spelling
them out, so one profile can be reused across environments::

    ${#Project#authUrl}     project property "authUrl"
    ${authUrl}              shorthand for the same
    ${#Env#CLIENT_SECRET}   environment variable

Resolved values are expanded again, so a property may itself reference
another property. :class:`~codegrant.oauth2.flow.OAuth2Flow` only depends on
the :class:`PropertyExpander` protocol; :class:`ProjectPropertyExpander` is the
implementation backed by :class:`~codegrant.models.ProjectConfig`.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Mapping, Protocol

from codegrant.exceptions import ConfigError

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\$\{([^{}]*)\}")
_MAX_DEPTH = 10


class PropertyExpander(Protocol):
    """Anything that resolves placeholders in a configuration string."""

    def expand(self, value: str) -> str: ...


class ProjectPropertyExpander:
    """Resolve ``${...}`` placeholders from project properties and the environment.

    Args:
        properties: Project property values keyed by name.
        environ: Environment used for ``${#Env#NAME}``. Defaults to
            :data:`os.environ`.
    """

    def __init__(
        self,
        properties: Mapping[str, str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._properties = dict(properties or {})
        self._environ = os.environ if environ is None else environ

    def expand(self, value: str) -> str:
        """Return *value* with every placeholder resolved.

        Raises:
            ConfigError: If a placeholder names an unknown property or
                variable, uses an unknown scope, or nests too deeply.
        """
        if "${" not in value:
            return value
        return self._expand(value, depth=0)

    def _expand(self, value: str, depth: int) -> str:
        if depth > _MAX_DEPTH:
            raise ConfigError(f"Property expansion nested too deeply in '{value}'")

        def _replace(match: re.Match[str]) -> str:
            resolved = self._lookup(match.group(1).strip())
            if "${" in resolved:
                resolved = self._expand(resolved, depth + 1)
            return resolved

        return _PLACEHOLDER_RE.sub(_replace, value)

    def _lookup(self, reference: str) -> str:
        if reference.startswith("#"):
            scope, sep, name = reference[1:].partition("#")
            if not sep:
                raise ConfigError(f"Malformed property reference '${{{reference}}}'")
        else:
            scope, name = "Project", reference

        if scope == "Project":
            if name not in self._properties:
                raise ConfigError(f"Unknown project property '{name}'")
            logger.debug("Expanded project property '%s'", name)
            return self._properties[name]

        if scope == "Env":
            value = self._environ.get(name)
            if value is None:
                raise ConfigError(f"Environment variable '{name}' is not set")
            logger.debug("Expanded environment variable '%s'", name)
            return value

        raise ConfigError(f"Unknown property scope '#{scope}' in '${{{reference}}}'")
