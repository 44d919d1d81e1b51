"""Configuration management with XDG paths, atomic writes, and project overlays.

This module handles all persistent configuration for codegrant:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.codegrant/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_profiles_dir`.
* **Project config** -- A single :class:`~codegrant.models.ProjectConfig`
  JSON file storing project properties, the default profile, and the
  browser timeout.
* **Profiles** -- One JSON file per OAuth2 client, each deserialised into an
  :class:`~codegrant.models.OAuth2Profile`. Managed via :func:`load_profile`,
  :func:`save_profile`, :func:`delete_profile`.
* **Precedence resolution** -- :func:`resolve_project_config` layers a
  project-local ``./codegrant.json`` over the user-level config.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a crash mid-write never truncates a profile
holding a freshly issued token.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from codegrant.exceptions import ConfigError
from codegrant.models import OAuth2Profile, ProjectConfig

_APP_NAME = "codegrant"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "codegrant.json"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/codegrant/`` (default ``~/.config/codegrant/``).
    On macOS/Windows: ``~/.codegrant/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/codegrant/`` (default ``~/.local/share/codegrant/``).
    On macOS/Windows: ``~/.codegrant/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return the profiles directory (``<config_dir>/profiles/``), creating it if necessary."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. Profiles hold client
    secrets and tokens, so the file is created owner-readable only.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        os.chmod(tmp_path, 0o600)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


# --- Project config ---


def _project_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_project_config() -> ProjectConfig:
    """Load the user-level project configuration.

    Returns:
        The deserialised :class:`~codegrant.models.ProjectConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _project_config_path()
    if not path.is_file():
        return ProjectConfig()
    data = _read_json(path, "project config")
    try:
        return ProjectConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc


def save_project_config(config: ProjectConfig) -> None:
    """Persist the user-level project configuration atomically."""
    data = config.model_dump(mode="json")
    _atomic_write(_project_config_path(), json.dumps(data, indent=2) + "\n")


def load_local_config() -> Optional[dict[str, Any]]:
    """Load the project-local ``./codegrant.json``, or ``None`` if absent.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project-local config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project-local config at {path}: expected an object")
    return data


def resolve_project_config() -> ProjectConfig:
    """Merge the project-local config over the user-level config.

    ``properties`` are merged key by key (local wins); ``default_profile``
    and ``browser_timeout`` are replaced when the local file sets them.
    The environment variable ``CODEGRANT_PROFILE`` overrides the default
    profile.
    """
    config = load_project_config()
    local = load_local_config()
    if local is not None:
        merged = config.model_dump()
        merged["properties"].update(local.get("properties") or {})
        for key in ("default_profile", "browser_timeout"):
            if local.get(key) is not None:
                merged[key] = local[key]
        try:
            config = ProjectConfig.model_validate(merged)
        except ValueError as exc:
            raise ConfigError(f"Invalid project-local config: {exc}") from exc

    env_profile = os.environ.get("CODEGRANT_PROFILE")
    if env_profile:
        config.default_profile = env_profile
    return config


# --- Profiles ---


def _profile_path(name: str) -> Path:
    if not name or "/" in name or "\\" in name or name.startswith("."):
        raise ConfigError(f"Invalid profile name '{name}'")
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return all profile names found in the profiles directory, sorted alphabetically."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def load_profile(name: str) -> OAuth2Profile:
    """Load and validate a profile from disk.

    Raises:
        ConfigError: If the profile file does not exist, contains invalid
            JSON, or fails Pydantic validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    data = _read_json(path, f"profile '{name}'")
    try:
        return OAuth2Profile.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: OAuth2Profile) -> None:
    """Persist a profile atomically; the file name is derived from ``profile.name``."""
    data = profile.model_dump(mode="json")
    _atomic_write(_profile_path(profile.name), json.dumps(data, indent=2) + "\n")


def delete_profile(name: str) -> None:
    """Delete a profile's JSON file from disk.

    Raises:
        ConfigError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()
