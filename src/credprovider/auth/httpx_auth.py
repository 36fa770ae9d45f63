"""httpx integration: authenticate feed requests with provider credentials.

:class:`ProviderAuth` plugs the orchestrator into :mod:`httpx`. It asks the
providers for credentials before the first request and, when the server
answers ``401``, asks again with ``is_retry`` set so that providers drop
stale tokens and re-prompt.

Example::

    import httpx
    from credprovider.auth import ProviderAuth

    source = "https://pkgs.example.com/v3/index.json"
    with httpx.Client(auth=ProviderAuth(source)) as client:
        index = client.get(source).json()
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Generator, Iterable
from typing import Optional

import httpx

from credprovider.auth.orchestrator import (
    CredentialProviderOrchestrator,
    create_default_orchestrator,
)
from credprovider.models import AuthType, TypedCredential

logger = logging.getLogger(__name__)


def basic_auth_header(credential: TypedCredential) -> str:
    """Encode *credential* as an ``Authorization: Basic`` header value per :rfc:`7617`."""
    raw = f"{credential.username or ''}:{credential.password or ''}"
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


class ProviderAuth(httpx.Auth):
    """httpx auth flow backed by credential providers.

    Only Basic credentials can be sent by httpx; other schemes returned by a
    provider are skipped. Provider invocation blocks, so with
    :class:`httpx.AsyncClient` the first request of a source may stall the
    event loop while a provider prompts.

    Args:
        source: Package source URI the credentials are requested for.
        orchestrator: Orchestrator to query. Defaults to
            :func:`~credprovider.auth.orchestrator.create_default_orchestrator`,
            created lazily on the first request.
        auth_types: Schemes this flow is allowed to send.
    """

    def __init__(
        self,
        source: str,
        orchestrator: Optional[CredentialProviderOrchestrator] = None,
        auth_types: Iterable[AuthType] = (AuthType.BASIC,),
    ) -> None:
        self._source = source
        self._orchestrator = orchestrator
        self._auth_types = frozenset(auth_types)

    def _select(self, is_retry: bool) -> Optional[TypedCredential]:
        if self._orchestrator is None:
            self._orchestrator = create_default_orchestrator()
        for credential in self._orchestrator.get_credentials(self._source, is_retry):
            if credential.auth_type in self._auth_types:
                return credential
            logger.debug(
                "Skipping %s credential for '%s'", credential.auth_type.value, self._source
            )
        return None

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        credential = self._select(is_retry=False)
        if credential is not None:
            request.headers["Authorization"] = basic_auth_header(credential)
        response = yield request

        if response.status_code != 401 or credential is None:
            return

        retry_credential = self._select(is_retry=True)
        if retry_credential is None:
            return
        request.headers["Authorization"] = basic_auth_header(retry_credential)
        yield request
