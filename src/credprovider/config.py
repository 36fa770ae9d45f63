"""Settings for provider discovery and invocation.

Settings live in ``config.json`` under the user's configuration directory:
``$XDG_CONFIG_HOME/credprovider`` on Linux and the BSDs, ``~/.credprovider``
elsewhere. Crash logs go to the matching data directory.

:func:`resolve_settings` layers the sources, highest first:

1. command-line flags,
2. ``CREDPROVIDER_*`` environment variables,
3. the ``providers`` section of ``config.json``,
4. the defaults of :class:`~credprovider.models.ProviderSettings`.

The file is always replaced atomically, so a crash mid-write leaves the
previous version in place.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from credprovider.exceptions import ConfigError
from credprovider.models import GlobalConfig, ProviderSettings, Verbosity

_APP_NAME = "credprovider"
_CONFIG_FILENAME = "config.json"

ENV_VERBOSITY = "CREDPROVIDER_VERBOSITY"
ENV_TIMEOUT = "CREDPROVIDER_TIMEOUT"
ENV_NON_INTERACTIVE = "CREDPROVIDER_NON_INTERACTIVE"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}

# XDG variable and its default location relative to $HOME, per directory kind.
_XDG_DIRS = {
    "config": ("XDG_CONFIG_HOME", Path(".config")),
    "data": ("XDG_DATA_HOME", Path(".local") / "share"),
}


# --- Directories ---


def _app_dir(kind: str) -> Path:
    system = platform.system()
    if system == "Linux" or system.endswith("BSD"):
        env_var, home_relative = _XDG_DIRS[kind]
        base = Path(os.environ.get(env_var) or Path.home() / home_relative)
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if kind == "data":
            path = path / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return (and create) the directory holding ``config.json``."""
    return _app_dir("config")


def get_data_dir() -> Path:
    """Return (and create) the directory crash logs are written under."""
    return _app_dir("data")


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* via a synced temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- config.json ---


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read ``config.json``, or return defaults when it does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or holds invalid values.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Write *config* to ``config.json`` atomically."""
    text = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(global_config_path(), text)


def set_provider_setting(config: GlobalConfig, key: str, value: str) -> GlobalConfig:
    """Return a copy of *config* with ``providers.<key>`` set from a string.

    List-valued settings (``env_vars``) accept a comma-separated value.
    The result is re-validated so bad values are reported immediately.

    Raises:
        ConfigError: If *key* is unknown or *value* does not validate.
    """
    if key not in ProviderSettings.model_fields:
        known = ", ".join(sorted(ProviderSettings.model_fields))
        raise ConfigError(f"Unknown provider setting '{key}'. Known settings: {known}")

    data: dict[str, Any] = config.providers.model_dump(mode="json")
    if key == "env_vars":
        data[key] = [v.strip() for v in value.split(",") if v.strip()]
    elif value.lower() in ("none", "null"):
        data[key] = None
    else:
        data[key] = value
    try:
        providers = ProviderSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for '{key}': {value!r}") from exc
    return config.model_copy(update={"providers": providers})


# --- Precedence resolution ---


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigError(f"Environment variable {name} must be a boolean, got {raw!r}")


def _parse_verbosity(raw: str) -> Verbosity:
    for level in Verbosity:
        if level.value.lower() == raw.strip().lower():
            return level
    choices = ", ".join(v.value for v in Verbosity)
    raise ConfigError(f"Unknown verbosity '{raw}'. Expected one of: {choices}")


def resolve_settings(
    cli_verbosity: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_non_interactive: Optional[bool] = None,
) -> ProviderSettings:
    """Resolve provider settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_verbosity``, ``cli_timeout``, ``cli_non_interactive``)
        2. Environment variables (``CREDPROVIDER_VERBOSITY``,
           ``CREDPROVIDER_TIMEOUT``, ``CREDPROVIDER_NON_INTERACTIVE``)
        3. User config (``~/.config/credprovider/config.json``)
        4. Defaults

    Returns:
        The effective :class:`~credprovider.models.ProviderSettings`.

    Raises:
        ConfigError: If the config file or an override is invalid.
    """
    settings = load_global_config().providers
    updates: dict[str, Any] = {}

    env_verbosity = os.environ.get(ENV_VERBOSITY)
    if env_verbosity:
        updates["verbosity"] = _parse_verbosity(env_verbosity)
    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        try:
            updates["timeout_seconds"] = float(env_timeout)
        except ValueError:
            raise ConfigError(
                f"Environment variable {ENV_TIMEOUT} must be a number, got {env_timeout!r}"
            ) from None
    env_non_interactive = os.environ.get(ENV_NON_INTERACTIVE)
    if env_non_interactive is not None:
        updates["interactive"] = not _parse_bool(ENV_NON_INTERACTIVE, env_non_interactive)

    if cli_verbosity is not None:
        updates["verbosity"] = _parse_verbosity(cli_verbosity)
    if cli_timeout is not None:
        updates["timeout_seconds"] = cli_timeout
    if cli_non_interactive:
        updates["interactive"] = False

    if not updates:
        return settings
    try:
        return ProviderSettings.model_validate(
            {**settings.model_dump(), **updates}
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid provider settings: {exc}") from exc
