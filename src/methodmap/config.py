"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for methodmap:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.methodmap/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a single :class:`~methodmap.models.GlobalConfig`
  JSON file holding the default output format and the
  :class:`~methodmap.models.WellKnownNames` table.
* **Project config** -- an optional ``./methodmap.json`` with the same
  shape, where any subset of keys may be given. Repositories that document
  a fork of the driver framework pin their module names here.
* **Precedence resolution** -- :func:`resolve_config` layers CLI flags,
  environment variables, project config, and global config.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from methodmap.exceptions import ConfigError
from methodmap.models import GlobalConfig

_APP_NAME = "methodmap"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "methodmap.json"

# Environment variable -> dotted config key.
_ENV_OVERRIDES = {
    "METHODMAP_FORMAT": "output.format",
    "METHODMAP_TYPES_MODULE": "names.types_module",
    "METHODMAP_BASE_DRIVER_MODULE": "names.base_driver_module",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms using XDG Base Directory paths (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/methodmap/`` (default
    ``~/.config/methodmap/``). Elsewhere: ``~/.methodmap/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/methodmap/`` (default
    ``~/.local/share/methodmap/``). Elsewhere: ``~/.methodmap/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a sibling temp file + rename.

    On any failure the temp file is removed and the original is untouched.
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
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
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


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults if no file exists.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./methodmap.json`` as a (possibly partial) config dict.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(cli_format: Optional[str] = None) -> GlobalConfig:
    """Resolve the effective config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_format``)
        2. Environment variables (``METHODMAP_FORMAT``,
           ``METHODMAP_TYPES_MODULE``, ``METHODMAP_BASE_DRIVER_MODULE``)
        3. Project config (``./methodmap.json``)
        4. User config (``~/.config/methodmap/config.json``)
        5. Defaults

    Raises:
        ConfigError: If any layer is invalid.
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        _deep_update(data, project)

    for env_var, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            set_dotted(data, key, value)

    if cli_format is not None:
        set_dotted(data, "output.format", cli_format)

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def set_dotted(data: dict[str, Any], key: str, value: Any) -> None:
    """Set ``data[a][b][c] = value`` for ``key="a.b.c"``.

    Raises:
        ConfigError: If an intermediate segment or the final key does not
            already exist in *data*.
    """
    *parents, final_key = key.split(".")
    target = data
    for segment in parents:
        if not isinstance(target.get(segment), dict):
            raise ConfigError(f"Invalid config key: {key}")
        target = target[segment]
    if final_key not in target:
        raise ConfigError(f"Unknown config key: {key}")
    target[final_key] = value


def _deep_update(base: dict[str, Any], overrides: dict[str, Any]) -> None:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
