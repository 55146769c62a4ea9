"""Cache transitório de respostas GET em memória.

ATENÇÃO: sem persistência; vale apenas durante a vida do cliente.
Somente respostas 2xx de GET são armazenadas. Escritas bem-sucedidas
(POST/PUT/PATCH/DELETE) invalidam entradas relacionadas ao mesmo path.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from enum import Enum
from typing import TYPE_CHECKING

from tixte_client.connector.models import HttpMethod

if TYPE_CHECKING:
    from collections.abc import Callable

    from tixte_client.connector.models import AuthMode, RequestDescriptor, ResponseEnvelope

CacheKey = tuple[str, str, str, tuple[tuple[str, str], ...]]


class CachePolicy(str, Enum):
    """Política de cache do cliente."""

    NONE = "none"
    MEMORY = "memory"


class ResponseCache:
    """Cache LRU com TTL para envelopes de resposta.

    Args:
        ttl_seconds: Validade de cada entrada
        max_entries: Máximo de entradas (mais antigas saem primeiro)
        clock: Relógio monotônico (injetável para testes)
    """

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds deve ser > 0")
        if max_entries < 1:
            raise ValueError("max_entries deve ser >= 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._store: OrderedDict[CacheKey, tuple[ResponseEnvelope, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._store)

    def get(self, descriptor: RequestDescriptor, auth: AuthMode) -> ResponseEnvelope | None:
        """Retorna envelope cacheado ou None (expirado/inexistente)."""
        if descriptor.method is not HttpMethod.GET:
            return None
        key = _key(descriptor, auth)
        entry = self._store.get(key)
        if entry is None:
            return None
        envelope, expires_at = entry
        if self._clock() >= expires_at:
            del self._store[key]
            return None
        self._store.move_to_end(key)
        return envelope

    def put(self, descriptor: RequestDescriptor, auth: AuthMode, envelope: ResponseEnvelope) -> None:
        """Armazena resposta 2xx de GET; ignora o resto."""
        if descriptor.method is not HttpMethod.GET or not envelope.is_success:
            return
        key = _key(descriptor, auth)
        self._store[key] = (envelope, self._clock() + self._ttl)
        self._store.move_to_end(key)
        while len(self._store) > self._max_entries:
            self._store.popitem(last=False)

    def invalidate(self, path: str) -> int:
        """Remove entradas cujo path contém ou está contido em `path`."""
        stale = [
            key
            for key in self._store
            if _related(key[2], path)
        ]
        for key in stale:
            del self._store[key]
        return len(stale)

    def clear(self) -> None:
        self._store.clear()


def _key(descriptor: RequestDescriptor, auth: AuthMode) -> CacheKey:
    return (auth.value, descriptor.method.value, descriptor.path, descriptor.query)


def _related(cached_path: str, path: str) -> bool:
    a = cached_path.rstrip("/")
    b = path.rstrip("/")
    return a == b or a.startswith(b + "/") or b.startswith(a + "/")
