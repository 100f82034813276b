"""
Per-run cache of vault backends, keyed by vault name.

Constructed once by the run's entry point and handed to the rotators, so
resources sharing a vault reuse one set of SDK clients. Vault names are
case-insensitive.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from kvrotator.vault.backend import VaultBackend

logger = logging.getLogger(__name__)

BackendFactory = Callable[[str], VaultBackend]


class VaultClientCache:
    def __init__(self, factory: BackendFactory) -> None:
        self._factory = factory
        self._backends: dict[str, VaultBackend] = {}
        self._lock = threading.Lock()

    def get(self, vault_name: str) -> VaultBackend:
        """Return the cached backend for `vault_name`, creating it on first use."""
        key = vault_name.lower()
        with self._lock:
            backend = self._backends.get(key)
            if backend is None:
                logger.debug("Creating vault backend for '%s'", key)
                backend = self._factory(key)
                self._backends[key] = backend
            return backend

    def __len__(self) -> int:
        return len(self._backends)

    def clear(self) -> None:
        with self._lock:
            self._backends.clear()
