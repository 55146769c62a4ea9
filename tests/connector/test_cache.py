"""Testes do ResponseCache."""

from __future__ import annotations

import pytest

from tixte_client.connector.cache import ResponseCache
from tixte_client.connector.models import AuthMode, HttpMethod, RequestDescriptor, ResponseEnvelope


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _get(path: str, query: tuple[tuple[str, str], ...] = ()) -> RequestDescriptor:
    return RequestDescriptor(method=HttpMethod.GET, path=path, query=query)


OK = ResponseEnvelope(status_code=200, body=b'{"success":true,"data":1}')


class TestResponseCache:
    """Armazenamento, expiração e invalidação."""

    def test_put_then_get(self) -> None:
        cache = ResponseCache()
        cache.put(_get("/users/@me"), AuthMode.API_KEY, OK)
        assert cache.get(_get("/users/@me"), AuthMode.API_KEY) is OK

    def test_key_includes_query_and_auth(self) -> None:
        cache = ResponseCache()
        cache.put(_get("/uploads", (("page", "1"),)), AuthMode.API_KEY, OK)
        assert cache.get(_get("/uploads", (("page", "2"),)), AuthMode.API_KEY) is None
        assert cache.get(_get("/uploads", (("page", "1"),)), AuthMode.SESSION) is None

    def test_only_successful_gets_are_stored(self) -> None:
        cache = ResponseCache()
        cache.put(_get("/a"), AuthMode.API_KEY, ResponseEnvelope(status_code=404))
        post = RequestDescriptor(method=HttpMethod.POST, path="/a")
        cache.put(post, AuthMode.API_KEY, OK)
        assert len(cache) == 0
        assert cache.get(post, AuthMode.API_KEY) is None

    def test_entries_expire(self) -> None:
        clock = FakeClock()
        cache = ResponseCache(ttl_seconds=10, clock=clock)
        cache.put(_get("/a"), AuthMode.API_KEY, OK)
        clock.now = 9.9
        assert cache.get(_get("/a"), AuthMode.API_KEY) is OK
        clock.now = 10.0
        assert cache.get(_get("/a"), AuthMode.API_KEY) is None
        assert len(cache) == 0

    def test_lru_eviction(self) -> None:
        cache = ResponseCache(max_entries=2)
        cache.put(_get("/a"), AuthMode.API_KEY, OK)
        cache.put(_get("/b"), AuthMode.API_KEY, OK)
        cache.get(_get("/a"), AuthMode.API_KEY)
        cache.put(_get("/c"), AuthMode.API_KEY, OK)

        assert cache.get(_get("/b"), AuthMode.API_KEY) is None
        assert cache.get(_get("/a"), AuthMode.API_KEY) is OK

    def test_invalidate_related_paths(self) -> None:
        cache = ResponseCache()
        for path in ("/users/@me/domains", "/users/@me/domains/a.b", "/users/@me", "/users/@meow"):
            cache.put(_get(path), AuthMode.API_KEY, OK)

        removed = cache.invalidate("/users/@me/domains")

        assert removed == 3
        assert cache.get(_get("/users/@meow"), AuthMode.API_KEY) is OK

    def test_clear(self) -> None:
        cache = ResponseCache()
        cache.put(_get("/a"), AuthMode.API_KEY, OK)
        cache.clear()
        assert len(cache) == 0

    @pytest.mark.parametrize("kwargs", [{"ttl_seconds": 0}, {"max_entries": 0}])
    def test_invalid_arguments(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            ResponseCache(**kwargs)
