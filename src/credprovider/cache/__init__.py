"""Provider outcome caching for credprovider.

This package provides :class:`ProviderResultCache`, the process-wide store
of interpreted provider outcomes keyed by provider path and source URI.
It guarantees that concurrent requests for the same key collapse into a
single provider invocation.
"""

from credprovider.cache.cache import (
    ProviderResultCache,
    get_default_cache,
    reset_default_cache,
)

__all__ = ["ProviderResultCache", "get_default_cache", "reset_default_cache"]
