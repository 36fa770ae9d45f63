"""Map a provider's declared authentication types onto the supported set."""

from __future__ import annotations

import logging

from credprovider.models import AuthType, ProviderResponse, TypedCredential

logger = logging.getLogger(__name__)

SUPPORTED_AUTH_TYPES: dict[str, AuthType] = {t.value.lower(): t for t in AuthType}


def negotiate(response: ProviderResponse) -> list[TypedCredential]:
    """Turn *response* into zero or more typed credentials.

    A response without ``AuthenticationTypes`` (or with an empty list) is
    treated as Basic. Otherwise each declared type is matched
    case-insensitively against :data:`SUPPORTED_AUTH_TYPES`; unsupported
    names are logged and dropped. An empty result means the provider only
    offered schemes this client cannot use.
    """

    def _credential(auth_type: AuthType) -> TypedCredential:
        return TypedCredential(
            username=response.username,
            password=response.password,
            auth_type=auth_type,
        )

    if not response.auth_types:
        return [_credential(AuthType.BASIC)]

    credentials: list[TypedCredential] = []
    for declared in response.auth_types:
        matching = SUPPORTED_AUTH_TYPES.get(declared.lower())
        if matching is None:
            logger.warning("The authentication scheme '%s' is not supported", declared)
            continue
        credentials.append(_credential(matching))
    return credentials
