"""Exception hierarchy for credprovider.

All exceptions inherit from :class:`CredentialProviderError`, which carries
an ``exit_code`` attribute mapped to a constant from
:mod:`credprovider.exit_codes`. The top-level error handler in
:func:`credprovider.app.main` catches ``CredentialProviderError`` and exits
with the appropriate code, while unexpected exceptions produce a crash log
and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    CredentialProviderError         (exit 1)
    +-- ConfigurationError          (exit 2)
    +-- ConfigError                 (exit 1)
    +-- ProcessInvocationError      (exit 6)
    +-- ProviderProtocolError       (exit 5)
    |   +-- MalformedResponseError
    |   +-- UnrecoverableProtocolError
    +-- ProviderAbortError          (exit 4)

An *abort* reported by a provider is a regular outcome inside the engine
(:class:`~credprovider.models.Abort`); it only becomes a
:class:`ProviderAbortError` when it crosses the orchestrator boundary.
"""

from credprovider.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_INVOCATION_ERROR,
    EXIT_PROVIDER_ABORT,
    EXIT_PROVIDER_ERROR,
)


class CredentialProviderError(Exception):
    """Base exception for all credprovider errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`credprovider.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(CredentialProviderError):
    """Raised when a provider request cannot be encoded on the command line.

    Provider arguments are joined with single spaces and never quoted, so a
    value containing a space is rejected before any process is launched.
    """

    exit_code = EXIT_INVALID_USAGE


class ConfigError(CredentialProviderError):
    """Raised for configuration problems (invalid JSON, bad setting values)."""

    exit_code = EXIT_GENERIC_FAILURE


class ProcessInvocationError(CredentialProviderError):
    """Raised when a provider executable cannot be launched or exceeds its timeout."""

    exit_code = EXIT_INVOCATION_ERROR


class ProviderProtocolError(CredentialProviderError):
    """Base class for providers that violate the exit-code/JSON protocol."""

    exit_code = EXIT_PROVIDER_ERROR


class MalformedResponseError(ProviderProtocolError):
    """Raised when a provider exits successfully but its JSON body is unusable."""


class UnrecoverableProtocolError(ProviderProtocolError):
    """Raised when a provider exits with a code outside the known taxonomy.

    The engine retries once at ``Information`` verbosity before letting this
    propagate.
    """


class ProviderAbortError(CredentialProviderError):
    """Raised by the orchestrator when a provider aborts the request.

    The message names the provider executable, the exact command line, the
    provider's own message and its captured stderr.
    """

    exit_code = EXIT_PROVIDER_ABORT
