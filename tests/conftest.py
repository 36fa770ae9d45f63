"""Shared test fixtures for credprovider.

Provides isolated config environments, scripted process runners, and a
factory for small executable fake providers. These fixtures are
automatically discovered by pytest.
"""

from __future__ import annotations

import logging
import os
import stat
import sys
import threading
from pathlib import Path
from typing import Callable, Optional

import pytest

from credprovider.cache import reset_default_cache
from credprovider.models import ProcessResult, ProviderSettings
from credprovider.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals_between_tests() -> None:
    """Reset the global OutputManager, shared cache and package logger.

    The CLI installs a RichHandler bound to the (test-runner redirected)
    stderr stream; leaving it in place would make later tests log to a
    closed file.
    """
    yield
    reset_output()
    reset_default_cache()
    logger = logging.getLogger("credprovider")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and provider search paths to tmp_path.

    Points XDG directories and HOME at tmp_path, clears the provider
    search-path and CREDPROVIDER_* environment variables, and changes the
    working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for var in [
        "NUGET_NETCORE_PLUGIN_PATHS",
        "NUGET_PLUGIN_PATHS",
        "CREDPROVIDER_VERBOSITY",
        "CREDPROVIDER_TIMEOUT",
        "CREDPROVIDER_NON_INTERACTIVE",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(tmp_path: Path) -> ProviderSettings:
    """Non-interactive settings whose search roots live under tmp_path."""
    return ProviderSettings(
        root_dir=tmp_path / "nuget-root",
        search_install_dir=False,
        interactive=False,
        timeout_seconds=30,
    )


# ---------------------------------------------------------------------------
# Scripted runner
# ---------------------------------------------------------------------------


class ScriptedRunner:
    """Process runner double returning queued results per provider.

    Each call pops the next :class:`ProcessResult` queued for the provider
    (the last one repeats) and records ``(provider, arguments)``.
    """

    def __init__(self, results: Optional[dict[str, list[ProcessResult]]] = None) -> None:
        self._results = {k: list(v) for k, v in (results or {}).items()}
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def add(self, provider: str, *results: ProcessResult) -> "ScriptedRunner":
        self._results.setdefault(provider, []).extend(results)
        return self

    def __call__(self, executable: str, arguments: str, timeout: float) -> ProcessResult:
        with self._lock:
            self.calls.append((executable, arguments))
            queue = self._results[executable]
            return queue.pop(0) if len(queue) > 1 else queue[0]

    def calls_for(self, provider: str) -> list[str]:
        return [args for exe, args in self.calls if exe == provider]


@pytest.fixture
def scripted_runner() -> ScriptedRunner:
    return ScriptedRunner()


def result(exit_code: int, stdout: str = "", stderr: str = "") -> ProcessResult:
    """Build a ProcessResult from raw text."""
    return ProcessResult(
        exit_code=exit_code,
        stdout_lines=stdout.splitlines(),
        stderr_lines=stderr.splitlines(),
    )


# ---------------------------------------------------------------------------
# Executable fake providers
# ---------------------------------------------------------------------------

posix_only = pytest.mark.skipif(
    os.name != "posix", reason="fake providers are shebang scripts"
)


@pytest.fixture
def make_provider() -> Callable[..., Path]:
    """Factory writing an executable fake provider script.

    The script prints *stdout* and *stderr*, appends its argv to
    ``<name>.calls`` next to itself, then exits with *exit_code*. The log
    matches the provider glob but is not executable, so discovery must skip it.
    """

    def _make(
        directory: Path,
        name: str,
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        calls_file = directory / f"{name}.calls"
        path.write_text(
            f"#!{sys.executable}\n"
            "import sys\n"
            f"with open({str(calls_file)!r}, 'a') as f:\n"
            "    f.write(' '.join(sys.argv[1:]) + '\\n')\n"
            f"sys.stdout.write({stdout!r})\n"
            f"sys.stderr.write({stderr!r})\n"
            f"sys.exit({exit_code})\n",
            encoding="utf-8",
        )
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make


def provider_calls(provider: Path) -> list[str]:
    """Return the argument strings a fake provider was invoked with."""
    calls_file = provider.parent / f"{provider.name}.calls"
    if not calls_file.is_file():
        return []
    return calls_file.read_text(encoding="utf-8").splitlines()

