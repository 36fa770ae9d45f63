"""Run a provider executable and capture its output.

:func:`run_process` is the default :data:`ProcessRunner`. The orchestrator
accepts any callable with the same signature, which is how tests replace
real processes with scripted results.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Callable

from credprovider.exceptions import ProcessInvocationError
from credprovider.models import ProcessResult

logger = logging.getLogger(__name__)

ProcessRunner = Callable[[str, str, float], ProcessResult]
"""``(executable, argument_string, timeout_seconds) -> ProcessResult``."""

DEFAULT_TIMEOUT_SECONDS = 600.0


def run_process(
    executable: str, arguments: str, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> ProcessResult:
    """Run *executable* with the space-separated *arguments*.

    stdin is inherited so an interactive provider can prompt on the
    terminal; stdout and stderr are captured as text lines.

    Args:
        executable: Path of the provider executable.
        arguments: Argument string as produced by
            :func:`~credprovider.providers.protocol.format_command_line`.
        timeout: Seconds to wait before the process is killed.

    Returns:
        The exit code and captured output lines.

    Raises:
        ProcessInvocationError: If the process cannot be started or does not
            finish within *timeout*.
    """
    command = [executable, *arguments.split()]
    try:
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
        )
    except subprocess.TimeoutExpired:
        raise ProcessInvocationError(
            f"Credential provider '{executable}' timed out after {timeout:g} seconds"
        ) from None
    except OSError as exc:
        raise ProcessInvocationError(
            f"Failed to start credential provider '{executable}': {exc}"
        ) from exc

    return ProcessResult(
        exit_code=result.returncode,
        stdout_lines=result.stdout.splitlines(),
        stderr_lines=result.stderr.splitlines(),
    )
