"""Numeric process exit codes for the ``credprovider`` CLI.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~credprovider.exceptions.CredentialProviderError`
subclass. Shell wrappers and CI scripts can inspect the exit code to
determine the failure class without parsing stderr.

These are the codes *this* program exits with. The codes a provider
executable exits with are defined by
:class:`~credprovider.providers.protocol.ProviderExitCode`.

Example::

    $ credprovider get https://pkgs.example.com/v3/index.json
    $ echo $?
    4   # EXIT_PROVIDER_ABORT -- a provider cancelled the request
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. a URI containing a space)."""

EXIT_NO_CREDENTIALS = 3
"""No provider produced a usable credential for the source."""

EXIT_PROVIDER_ABORT = 4
"""A provider aborted the request (user cancelled or fatal provider error)."""

EXIT_PROVIDER_ERROR = 5
"""A provider broke the protocol (unknown exit code or malformed JSON body)."""

EXIT_INVOCATION_ERROR = 6
"""A provider executable could not be launched or timed out."""
