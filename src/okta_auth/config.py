"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for okta_auth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.okta-auth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`. The credential store itself lives in
  :func:`get_auth_dir` (``~/.mcp-auth`` by default) so that tools sharing
  the session keep finding it in the same place.
* **Settings** -- A single :class:`~okta_auth.models.AuthSettings` JSON
  file. Managed via :func:`load_settings` and :func:`save_settings`.
* **Precedence resolution** -- ``MCP_AUTH_*`` environment variables override
  the file, which overrides built-in defaults.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent partially written files from being read by
another process.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from okta_auth.exceptions import ConfigError
from okta_auth.models import AuthSettings

_APP_NAME = "okta-auth"
_CONFIG_FILENAME = "config.json"
_DEFAULT_AUTH_DIRNAME = ".mcp-auth"

ENV_AUTH_DIR = "MCP_AUTH_DIR"
ENV_IDP_URL = "MCP_AUTH_IDP_URL"
ENV_LOGIN_TIMEOUT = "MCP_AUTH_LOGIN_TIMEOUT"
ENV_HEADLESS = "MCP_AUTH_HEADLESS"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/okta-auth/`` (default ``~/.config/okta-auth/``).
    On macOS/Windows: ``~/.okta-auth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/okta-auth/`` (default ``~/.local/share/okta-auth/``).
    On macOS/Windows: ``~/.okta-auth/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_auth_dir(settings: Optional[AuthSettings] = None) -> Path:
    """Return the credential store root.

    Resolution order: ``settings.auth_dir`` (already env-resolved by
    :func:`load_settings`), then ``~/.mcp-auth``. The directory is not
    created here; :class:`~okta_auth.auth.credential_store.CredentialStore`
    owns its layout.
    """
    if settings is not None and settings.auth_dir:
        return Path(settings.auth_dir).expanduser()
    return Path.home() / _DEFAULT_AUTH_DIRNAME


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. When *mode* is
    given it is applied to the temp file before any content is written, so
    the final file never exists with looser permissions. On any failure the
    temp file is removed and the exception re-raised.
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
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Settings ---


def _settings_path() -> Path:
    """Path to the settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_settings_file() -> AuthSettings:
    """Load settings from the config directory without environment overrides.

    Returns:
        The deserialised :class:`~okta_auth.models.AuthSettings`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            validation.
    """
    path = _settings_path()
    if not path.is_file():
        return AuthSettings()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return AuthSettings.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def load_settings() -> AuthSettings:
    """Resolve settings with full precedence chain.

    Precedence (high to low):
        1. Environment variables (``MCP_AUTH_DIR``, ``MCP_AUTH_IDP_URL``,
           ``MCP_AUTH_LOGIN_TIMEOUT``, ``MCP_AUTH_HEADLESS``)
        2. User config (``~/.config/okta-auth/config.json``)
        3. Defaults

    Raises:
        ConfigError: If the config file is invalid or an environment
            variable cannot be parsed.
    """
    settings = load_settings_file()

    env_dir = os.environ.get(ENV_AUTH_DIR)
    if env_dir:
        settings.auth_dir = env_dir

    env_url = os.environ.get(ENV_IDP_URL)
    if env_url:
        settings.idp_url = env_url

    env_timeout = os.environ.get(ENV_LOGIN_TIMEOUT)
    if env_timeout:
        try:
            settings.login_timeout_seconds = int(env_timeout)
        except ValueError:
            raise ConfigError(
                f"{ENV_LOGIN_TIMEOUT} must be an integer number of seconds, got: {env_timeout}"
            ) from None

    env_headless = os.environ.get(ENV_HEADLESS)
    if env_headless:
        settings.headless = env_headless.lower() in ("1", "true", "yes")

    return settings


def save_settings(settings: AuthSettings) -> None:
    """Persist settings atomically to disk.

    Args:
        settings: The settings to save.
    """
    data = settings.model_dump(mode="json", by_alias=True)
    atomic_write(_settings_path(), json.dumps(data, indent=2) + "\n")
