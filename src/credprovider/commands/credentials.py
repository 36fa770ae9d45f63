"""Credential commands -- query providers from the command line.

Provides the ``credprovider get`` and ``credprovider providers`` commands.
They are mostly useful to debug a provider installation: ``providers``
shows which executables would be asked, ``get`` runs them for a source
exactly as a package client would.

Typical workflow::

    credprovider providers
    credprovider get https://pkgs.example.com/v3/index.json
    credprovider get https://pkgs.example.com/v3/index.json --retry --verbosity Verbose
"""

from __future__ import annotations

from typing import Optional

import typer

from credprovider.exit_codes import EXIT_NO_CREDENTIALS
from credprovider.models import TypedCredential
from credprovider.output import format_response, info, print_table, suggest

MASK = "********"


def _credential_record(credential: TypedCredential, show_password: bool) -> dict[str, str]:
    password = credential.password or ""
    return {
        "username": credential.username or "",
        "password": password if show_password or not password else MASK,
        "auth_type": credential.auth_type.value,
    }


def get_command(
    source: str = typer.Argument(help="Package source URI to get credentials for."),
    retry: bool = typer.Option(
        False, "--retry", help="Ignore cached results and ask providers to re-prompt."
    ),
    show_password: bool = typer.Option(
        False, "--show-password", help="Print passwords instead of masking them."
    ),
    verbosity: Optional[str] = typer.Option(
        None,
        "--verbosity",
        help="Provider verbosity: Debug, Verbose, Information, Minimal, Warning, Error.",
    ),
    non_interactive: bool = typer.Option(
        False, "--non-interactive", help="Tell providers not to prompt."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for each provider."
    ),
) -> None:
    """Ask every installed credential provider for SOURCE credentials.

    Credentials are printed in provider order; the first one is what a
    package client would use.

    Raises:
        typer.Exit: With code 3 when no provider returns a credential.

    Example::

        credprovider get https://pkgs.example.com/v3/index.json --show-password
    """
    from credprovider.auth import create_default_orchestrator
    from credprovider.config import resolve_settings

    settings = resolve_settings(
        cli_verbosity=verbosity,
        cli_timeout=timeout,
        cli_non_interactive=non_interactive or None,
    )
    orchestrator = create_default_orchestrator(settings)
    credentials = orchestrator.get_credentials(source, is_retry=retry)

    if not credentials:
        info(f"No credentials available for {source}.")
        suggest("List the providers that were asked: credprovider providers")
        raise typer.Exit(code=EXIT_NO_CREDENTIALS)

    records = [_credential_record(c, show_password) for c in credentials]
    format_response(records)


def providers_command() -> None:
    """List the credential provider executables, in query order."""
    from credprovider.config import resolve_settings
    from credprovider.providers.discovery import collect_providers

    settings = resolve_settings()
    providers = collect_providers(settings)
    if not providers:
        info("No credential providers found.")
        suggest(
            f"Install one under {settings.root_dir} or list directories in "
            + " / ".join(settings.env_vars)
        )
        return

    print_table(
        ["#", "provider"],
        [[str(i), path] for i, path in enumerate(providers, 1)],
        title="Credential providers",
    )
