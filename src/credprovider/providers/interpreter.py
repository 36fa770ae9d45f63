"""Interpret what a provider process returned.

A provider run is classified by its exit code:

=========================  ==============================================
Exit code                  Outcome
=========================  ==============================================
``0`` (success)            :class:`~credprovider.models.AuthSuccess`; the
                           JSON body is required
``1`` (not applicable)     :class:`~credprovider.models.NoCredentials`
``2`` (abort)              :class:`~credprovider.models.Abort`
anything else              :class:`~credprovider.exceptions.UnrecoverableProtocolError`
=========================  ==============================================

:func:`call_with_escalation` adds the single retry at ``Information``
verbosity that providers in the wild need when they choke on other
verbosity levels.
"""

from __future__ import annotations

import logging

from credprovider.exceptions import MalformedResponseError, UnrecoverableProtocolError
from credprovider.models import (
    Abort,
    AuthSuccess,
    CredentialRequest,
    ExitOutcome,
    NoCredentials,
    ProcessResult,
    Verbosity,
)
from credprovider.providers.negotiation import negotiate
from credprovider.providers.process import (
    DEFAULT_TIMEOUT_SECONDS,
    ProcessRunner,
    run_process,
)
from credprovider.providers.protocol import (
    ProviderExitCode,
    format_command_line,
    parse_response,
)

logger = logging.getLogger(__name__)


def interpret(provider: str, command_line: str, result: ProcessResult) -> ExitOutcome:
    """Classify one provider run.

    Args:
        provider: Path of the provider executable (used in messages).
        command_line: The argument string the provider was invoked with.
        result: Exit code and captured output of the run.

    Returns:
        The outcome of the run.

    Raises:
        MalformedResponseError: Exit code ``0`` without a usable JSON body.
        UnrecoverableProtocolError: Exit code outside the protocol.
    """
    for line in result.stderr_lines:
        logger.debug("%s: %s", provider, line)

    stdout = result.stdout
    stderr = result.stderr
    response = parse_response(stdout)
    message = (response.message or "") if response is not None else ""

    if result.exit_code == ProviderExitCode.SUCCESS:
        if response is None or not response.is_valid:
            raise MalformedResponseError(
                f"Credential provider returned an invalid result ({result.exit_code}): "
                f"{stdout}\nStandard Error: {stderr}"
            )
        if response.username is None and response.password is None:
            logger.debug("%s returned neither a username nor a password", provider)
        return AuthSuccess(credentials=negotiate(response))

    if result.exit_code == ProviderExitCode.PROVIDER_NOT_APPLICABLE:
        return NoCredentials(message=message)

    if result.exit_code == ProviderExitCode.ABORT:
        return Abort(
            message=f"\"'{provider}' {command_line}\":{message}\nStandard Error: {stderr}"
        )

    raise UnrecoverableProtocolError(
        f"Credential provider returned an invalid result ({result.exit_code}): "
        f"{stdout}\nStandard Error: {stderr}"
    )


def call_provider(
    provider: str,
    request: CredentialRequest,
    runner: ProcessRunner = run_process,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ExitOutcome:
    """Invoke *provider* once for *request* and interpret the result.

    Raises:
        ConfigurationError: If the request cannot be encoded; nothing is run.
        ProcessInvocationError: If the runner fails to launch or times out.
        MalformedResponseError: See :func:`interpret`.
        UnrecoverableProtocolError: See :func:`interpret`.
    """
    command_line = format_command_line(request)
    result = runner(provider, command_line, timeout)
    return interpret(provider, command_line, result)


def call_with_escalation(
    provider: str,
    request: CredentialRequest,
    runner: ProcessRunner = run_process,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ExitOutcome:
    """Like :func:`call_provider`, retrying once at ``Information`` verbosity.

    The retry only happens for :class:`UnrecoverableProtocolError` and only
    if *request* asked for a different verbosity. The second attempt's
    outcome (or failure) is what the caller sees.
    """
    try:
        return call_provider(provider, request, runner, timeout)
    except UnrecoverableProtocolError as exc:
        if request.verbosity == Verbosity.INFORMATION:
            raise
        logger.debug(
            "Retrying provider '%s' at %s verbosity after: %s",
            provider,
            Verbosity.INFORMATION.value,
            exc,
        )
        retry_request = request.model_copy(update={"verbosity": Verbosity.INFORMATION})
        return call_provider(provider, retry_request, runner, timeout)
