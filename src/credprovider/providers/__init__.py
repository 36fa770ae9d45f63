"""Everything that deals with a single provider executable.

- :mod:`~credprovider.providers.discovery` -- find provider executables.
- :mod:`~credprovider.providers.protocol` -- encode requests, decode responses.
- :mod:`~credprovider.providers.process` -- run a provider and capture output.
- :mod:`~credprovider.providers.interpreter` -- classify a run into an outcome.
- :mod:`~credprovider.providers.negotiation` -- map declared auth types.

The cross-provider logic (caching, aggregation, abort handling) lives in
:mod:`credprovider.auth.orchestrator`.
"""

from credprovider.providers.discovery import collect_providers
from credprovider.providers.interpreter import call_provider, call_with_escalation, interpret
from credprovider.providers.negotiation import negotiate
from credprovider.providers.process import ProcessRunner, run_process
from credprovider.providers.protocol import (
    ProviderExitCode,
    build_args,
    format_command_line,
    parse_response,
)

__all__ = [
    "ProcessRunner",
    "ProviderExitCode",
    "build_args",
    "call_provider",
    "call_with_escalation",
    "collect_providers",
    "format_command_line",
    "interpret",
    "negotiate",
    "parse_response",
    "run_process",
]
