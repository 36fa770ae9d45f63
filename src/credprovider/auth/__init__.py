"""Credential resolution across all installed providers.

The main entry points are:

- :class:`CredentialProviderOrchestrator` -- queries every discovered
  provider for a source and aggregates the credentials.
- :func:`create_default_orchestrator` -- factory wired to the user's
  configuration and the process-wide outcome cache.
- :class:`ProviderAuth` -- :class:`httpx.Auth` adapter for feed requests.

Typical usage::

    from credprovider.auth import create_default_orchestrator

    orchestrator = create_default_orchestrator()
    credential = orchestrator.get_credential(source)
"""

from credprovider.auth.httpx_auth import ProviderAuth, basic_auth_header
from credprovider.auth.orchestrator import (
    CredentialProviderOrchestrator,
    create_default_orchestrator,
)

__all__ = [
    "CredentialProviderOrchestrator",
    "ProviderAuth",
    "basic_auth_header",
    "create_default_orchestrator",
]
