"""Command-line and JSON protocol spoken to credential provider executables.

A provider is invoked as::

    <provider> -Uri <uri> -OutputFormat Json [-NonInteractive True]
               [-CanShowDialog True] [-IsRetry True] [-Verbosity <level>]

writes a single JSON document to stdout (see
:class:`~credprovider.models.ProviderResponse`) and exits with one of the
codes in :class:`ProviderExitCode`.

Arguments are joined with single spaces and never quoted, so no argument
value may contain a space.
"""

from __future__ import annotations

import enum
import json
from typing import Optional

from pydantic import ValidationError

from credprovider.exceptions import ConfigurationError
from credprovider.models import CredentialRequest, ProviderResponse, Verbosity

OUTPUT_FORMAT = "Json"


class ProviderExitCode(enum.IntEnum):
    """Exit codes a provider may use. Anything else is a protocol violation."""

    SUCCESS = 0
    PROVIDER_NOT_APPLICABLE = 1
    ABORT = 2


def _flag(value: bool) -> str:
    return "True" if value else "False"


def build_args(request: CredentialRequest) -> list[str]:
    """Encode *request* as the provider argument list.

    Boolean switches are only emitted when true; ``-Verbosity`` is only
    emitted when it differs from ``Information``.

    Raises:
        ConfigurationError: If any argument contains a space.
    """
    args = ["-Uri", request.uri, "-OutputFormat", OUTPUT_FORMAT]
    if request.non_interactive:
        args += ["-NonInteractive", _flag(request.non_interactive)]
    if request.can_show_dialog:
        args += ["-CanShowDialog", _flag(request.can_show_dialog)]
    if request.is_retry:
        args += ["-IsRetry", _flag(request.is_retry)]
    if request.verbosity != Verbosity.INFORMATION:
        args += ["-Verbosity", request.verbosity.value]

    for arg in args:
        if " " in arg:
            raise ConfigurationError(
                f"Credential provider argument cannot contain a space: {arg!r}"
            )
    return args


def format_command_line(request: CredentialRequest) -> str:
    """Return the space-joined argument string for *request*."""
    return " ".join(build_args(request))


def parse_response(text: str) -> Optional[ProviderResponse]:
    """Parse a provider's stdout into a :class:`ProviderResponse`.

    Returns:
        The parsed response, or ``None`` when *text* is empty, is JSON
        ``null``, is not valid JSON, or does not match the schema. Whether
        ``None`` is acceptable depends on the exit code and is decided by
        the interpreter.
    """
    if not text.strip():
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return ProviderResponse.model_validate(data)
    except ValidationError:
        return None
