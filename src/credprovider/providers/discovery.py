"""Discovery of credential provider executables on disk.

Provider executables are looked up in three places, in this order:

1. Every directory listed in the configured environment variables
   (``NUGET_NETCORE_PLUGIN_PATHS`` then ``NUGET_PLUGIN_PATHS`` by default),
   each holding a ``;``-separated list.
2. The per-user plugin root (``~/.nuget/plugins/netcore``).
3. This package's own installation directory -- the interpreter's scripts
   directory unless configured otherwise -- so that providers installed
   into the same environment are always found.

Directories in (1) and (2) are searched recursively; (3) is searched
non-recursively. Missing directories are skipped silently. Only runnable
files are kept: on POSIX the execute bit must be set, on Windows the name
must end in ``.exe``. Companion files shipped next to a provider
(``.deps.json``, ``.runtimeconfig.json``, ``.pdb``) match the same glob
but are never returned. The result is de-duplicated, keeping the first
occurrence.
"""

from __future__ import annotations

import logging
import os
import sysconfig
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Optional

from credprovider.models import ProviderSettings

logger = logging.getLogger(__name__)

PATH_SEPARATOR = ";"


def paths_from_env_var(name: str, environ: Optional[Mapping[str, str]] = None) -> list[str]:
    """Split the ``;``-separated directory list held by environment variable *name*.

    Returns:
        The non-empty entries in order, or an empty list when the variable
        is unset or empty.
    """
    env = os.environ if environ is None else environ
    value = env.get(name)
    if not value:
        return []
    return [p for p in value.split(PATH_SEPARATOR) if p]


def default_install_dir() -> Optional[Path]:
    """Return the directory console scripts of this environment are installed into."""
    scripts = sysconfig.get_path("scripts")
    return Path(scripts) if scripts else None


def is_runnable(path: Path) -> bool:
    """True when *path* is a file the operating system can start."""
    if not path.is_file():
        return False
    if os.name == "nt":
        return path.suffix.lower() == ".exe"
    return os.access(path, os.X_OK)


def _runnable(candidates: Iterable[Path]) -> list[str]:
    found: list[str] = []
    for path in sorted(candidates):
        if is_runnable(path):
            found.append(str(path.absolute()))
        elif path.is_file():
            logger.debug("Skipping non-executable file '%s'", path)
    return found


def find_all(
    root_path: Path,
    custom_paths: Iterable[str],
    pattern: str,
    install_dir: Optional[Path] = None,
    install_pattern: Optional[str] = None,
) -> list[str]:
    """List runnable provider files, custom paths first, then *root_path*, then *install_dir*.

    Files matching the pattern that cannot be executed are skipped.
    Duplicates are *not* removed here; see :func:`collect_providers`.
    """
    directories = [Path(p) for p in custom_paths]
    directories.append(root_path)

    found: list[str] = []
    for directory in directories:
        if not directory.is_dir():
            logger.debug("Skipping missing provider directory '%s'", directory)
            continue
        found.extend(_runnable(directory.rglob(pattern)))

    if install_dir is not None and install_dir.is_dir():
        found.extend(_runnable(install_dir.glob(install_pattern or pattern)))
    return found


def collect_providers(
    settings: ProviderSettings, environ: Optional[Mapping[str, str]] = None
) -> list[str]:
    """Discover provider executables according to *settings*.

    Args:
        settings: Search roots, patterns and environment variable names.
        environ: Environment to read the search-path variables from.
            Defaults to :data:`os.environ`.

    Returns:
        Absolute provider paths, de-duplicated in first-seen order.
    """
    custom_paths = [
        path for name in settings.env_vars for path in paths_from_env_var(name, environ)
    ]
    install_dir: Optional[Path] = None
    if settings.search_install_dir:
        install_dir = settings.install_dir or default_install_dir()

    providers = list(
        dict.fromkeys(
            find_all(
                settings.root_dir.expanduser(),
                custom_paths,
                settings.plugin_pattern,
                install_dir,
                settings.install_pattern,
            )
        )
    )
    logger.debug("Discovered %d credential provider(s)", len(providers))
    return providers
