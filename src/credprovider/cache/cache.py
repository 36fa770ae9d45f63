"""In-memory cache of provider outcomes with single-flight invocation.

Entries are keyed by ``<provider path>_<source uri>`` and live for the
lifetime of the cache object; nothing is evicted or expires. Abort
outcomes are never stored, so the next request for that key asks the
provider again.

One lock guards the whole map for the "check, invoke, store" sequence.
Two callers missing on the same key therefore never launch the same
provider twice in parallel. The price is that misses on *different* keys
are serialised too, which is fine for the handful of invocations a
process makes.

See Also:
    :class:`~credprovider.auth.orchestrator.CredentialProviderOrchestrator`
    -- the consumer that supplies the invoke callback.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from credprovider.models import Abort, ExitOutcome

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "_"


class ProviderResultCache:
    """Thread-safe ``(provider, source) -> outcome`` map.

    Example::

        cache = ProviderResultCache()
        outcome = cache.get_or_invoke(
            "/opt/providers/CredentialProvider.Foo",
            "https://pkgs.example.com/v3/index.json",
            is_retry=False,
            invoke=lambda: call_with_escalation(provider, request),
        )
    """

    def __init__(self) -> None:
        self._entries: dict[str, ExitOutcome] = {}
        self._lock = threading.Lock()

    def get(self, provider: str, source: str) -> Optional[ExitOutcome]:
        """Return the cached outcome for ``(provider, source)``, or ``None``."""
        return self._entries.get(self.make_key(provider, source))

    def get_or_invoke(
        self,
        provider: str,
        source: str,
        is_retry: bool,
        invoke: Callable[[], ExitOutcome],
    ) -> ExitOutcome:
        """Return the cached outcome or compute it with *invoke* under the lock.

        A non-retry request that hits the cache returns immediately without
        taking the lock. Otherwise the lock is taken, the cache re-checked
        (non-retry only), and *invoke* called. The result is stored unless
        it is an :class:`~credprovider.models.Abort`.

        Args:
            provider: Provider executable path.
            source: Package source URI.
            is_retry: Force a fresh invocation even when an entry exists.
            invoke: Zero-argument callable that runs the provider.

        Returns:
            The cached or freshly computed outcome. Exceptions raised by
            *invoke* propagate and leave the cache untouched.
        """
        key = self.make_key(provider, source)
        if not is_retry:
            cached = self._entries.get(key)
            if cached is not None:
                return cached

        with self._lock:
            if not is_retry:
                cached = self._entries.get(key)
                if cached is not None:
                    return cached

            outcome = invoke()
            if not isinstance(outcome, Abort):
                self._entries[key] = outcome
            return outcome

    def invalidate(self, provider: str, source: str) -> None:
        """Drop the entry for ``(provider, source)`` if present."""
        with self._lock:
            self._entries.pop(self.make_key(provider, source), None)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics (``size`` and per-kind counts)."""
        entries = list(self._entries.values())
        kinds: dict[str, int] = {}
        for outcome in entries:
            kinds[outcome.kind] = kinds.get(outcome.kind, 0) + 1
        return {"size": len(entries), "kinds": kinds}

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def make_key(provider: str, source: str) -> str:
        """Join provider and source with :data:`KEY_SEPARATOR`."""
        return f"{provider}{KEY_SEPARATOR}{source}"


_default_cache: Optional[ProviderResultCache] = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> ProviderResultCache:
    """Return the process-wide cache shared by default orchestrators."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = ProviderResultCache()
        return _default_cache


def reset_default_cache() -> None:
    """Forget the process-wide cache. Primarily useful in test suites."""
    global _default_cache
    with _default_cache_lock:
        _default_cache = None
