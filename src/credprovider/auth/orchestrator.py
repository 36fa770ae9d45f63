"""Orchestrator -- ask every provider for credentials for a source.

The :class:`CredentialProviderOrchestrator` is the central coordinator of
the package. For one source URI it discovers the provider executables,
resolves each one through the :class:`~credprovider.cache.ProviderResultCache`
and aggregates the credentials they return:

- :class:`~credprovider.models.AuthSuccess` contributes its credentials,
  in provider order.
- :class:`~credprovider.models.NoCredentials` contributes nothing.
- :class:`~credprovider.models.Abort` stops the loop and is raised as
  :class:`~credprovider.exceptions.ProviderAbortError`.

For most use cases, call :func:`create_default_orchestrator` to get an
orchestrator wired to the user's configuration and the process-wide cache.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Optional

from credprovider.cache import ProviderResultCache, get_default_cache
from credprovider.exceptions import ProviderAbortError
from credprovider.models import (
    Abort,
    AuthSuccess,
    CredentialRequest,
    ExitOutcome,
    ProviderSettings,
    TypedCredential,
)
from credprovider.providers.discovery import collect_providers
from credprovider.providers.interpreter import call_with_escalation
from credprovider.providers.process import ProcessRunner, run_process

logger = logging.getLogger(__name__)


def _stdin_is_interactive() -> bool:
    return hasattr(sys.stdin, "isatty") and sys.stdin.isatty()


class CredentialProviderOrchestrator:
    """Resolve credentials for package sources through provider executables.

    Args:
        settings: Discovery and invocation settings. Defaults to
            :class:`~credprovider.models.ProviderSettings` defaults.
        cache: Outcome cache. A private cache is created when ``None``; pass
            :func:`~credprovider.cache.get_default_cache` to share results
            across orchestrators.
        runner: Process runner used to invoke providers.
        discover: Zero-argument callable returning provider paths. Defaults
            to :func:`~credprovider.providers.discovery.collect_providers`
            with *settings*; called on every :meth:`get_credentials`.

    Example::

        orchestrator = CredentialProviderOrchestrator()
        for credential in orchestrator.get_credentials("https://pkgs.example.com/v3/index.json"):
            print(credential.username, credential.auth_type.value)
    """

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        cache: Optional[ProviderResultCache] = None,
        runner: ProcessRunner = run_process,
        discover: Optional[Callable[[], list[str]]] = None,
    ) -> None:
        self._settings = settings or ProviderSettings()
        self._cache = cache if cache is not None else ProviderResultCache()
        self._runner = runner
        self._discover = discover or (lambda: collect_providers(self._settings))

    @property
    def settings(self) -> ProviderSettings:
        return self._settings

    @property
    def cache(self) -> ProviderResultCache:
        return self._cache

    def providers(self) -> list[str]:
        """Run discovery and return the provider paths in query order."""
        return self._discover()

    def build_request(self, source: str, is_retry: bool) -> CredentialRequest:
        """Build the request sent to each provider for *source*."""
        interactive = self._settings.interactive
        if interactive is None:
            interactive = _stdin_is_interactive()
        return CredentialRequest(
            uri=source,
            non_interactive=not interactive,
            can_show_dialog=interactive,
            is_retry=is_retry,
            verbosity=self._settings.verbosity,
        )

    def resolve(self, provider: str, source: str, is_retry: bool = False) -> ExitOutcome:
        """Return the outcome of *provider* for *source*, invoking it if needed.

        Cached outcomes are reused unless *is_retry* is set. At most one
        invocation per ``(provider, source)`` runs at a time.

        Raises:
            ConfigurationError: If *source* cannot be put on a command line.
            ProcessInvocationError: If the provider cannot be run.
            ProviderProtocolError: If the provider breaks the protocol.
        """
        request = self.build_request(source, is_retry)

        def _invoke() -> ExitOutcome:
            logger.debug("Calling provider '%s' for credentials", provider)
            return call_with_escalation(
                provider, request, self._runner, self._settings.timeout_seconds
            )

        return self._cache.get_or_invoke(provider, source, is_retry, _invoke)

    def get_credentials(self, source: str, is_retry: bool = False) -> list[TypedCredential]:
        """Collect credentials for *source* from every discovered provider.

        Args:
            source: The package source URI.
            is_retry: Set when previously returned credentials were rejected;
                bypasses the cache and tells providers to re-prompt.

        Returns:
            All credentials, flattened in provider order. Empty when no
            provider applies.

        Raises:
            ProviderAbortError: If a provider aborts. Later providers are
                not queried.
        """
        credentials: list[TypedCredential] = []
        for provider in self.providers():
            outcome = self.resolve(provider, source, is_retry)
            if isinstance(outcome, Abort):
                raise ProviderAbortError(outcome.message)
            if isinstance(outcome, AuthSuccess):
                credentials.extend(outcome.credentials)
        return credentials

    def get_credential(self, source: str, is_retry: bool = False) -> Optional[TypedCredential]:
        """Return the first credential for *source*, or ``None``."""
        credentials = self.get_credentials(source, is_retry)
        return credentials[0] if credentials else None


def create_default_orchestrator(
    settings: Optional[ProviderSettings] = None,
) -> CredentialProviderOrchestrator:
    """Create an orchestrator using the user's settings and the shared cache.

    Args:
        settings: Explicit settings. When ``None`` they are loaded with
            :func:`~credprovider.config.resolve_settings`.

    Returns:
        A ready-to-use :class:`CredentialProviderOrchestrator`.
    """
    if settings is None:
        from credprovider.config import resolve_settings

        settings = resolve_settings()
    return CredentialProviderOrchestrator(settings=settings, cache=get_default_cache())
