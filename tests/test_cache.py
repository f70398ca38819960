"""Analysis cache tests."""

import threading
import time

import pytest
from conftest import JEEP
from inputcheck.cache import AnalysisCache, cache_key
from inputcheck.classify import gate
from inputcheck.normalizer import Normalizer


def _analysis(text):
    normalized = Normalizer().normalize(text)
    return normalized, gate(normalized, text)


class TestAnalysisCache:
    """Test AnalysisCache"""

    def test_compute_once(self):
        cache = AnalysisCache()
        calls = []

        def compute():
            calls.append(1)
            return _analysis(JEEP)

        first = cache.get_or_compute(JEEP, compute)
        second = cache.get_or_compute(JEEP, compute)

        assert first is second
        assert len(calls) == 1
        assert (cache.hits, cache.misses) == (1, 1)
        assert cache.get(JEEP) is first
        assert cache.get("other") is None

    def test_lru_eviction(self):
        cache = AnalysisCache(max_entries=2)
        cache.get_or_compute("a", lambda: _analysis("a"))
        cache.get_or_compute("b", lambda: _analysis("b"))
        cache.get("a")
        cache.get_or_compute("c", lambda: _analysis("c"))

        assert len(cache) == 2
        assert cache.get("b") is None
        assert cache.get("a") is not None
        assert cache.get("c") is not None

    def test_concurrent_same_key(self):
        cache = AnalysisCache()
        calls = []
        lock = threading.Lock()

        def compute():
            with lock:
                calls.append(1)
            time.sleep(0.05)
            return _analysis(JEEP)

        results = []

        def worker():
            results.append(cache.get_or_compute(JEEP, compute))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert len(results) == 8
        assert all(r is results[0] for r in results)

    def test_failed_compute_releases_key_lock(self):
        cache = AnalysisCache()

        def broken():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            cache.get_or_compute(JEEP, broken)

        assert cache.pending == 0
        assert len(cache) == 0

        result = cache.get_or_compute(JEEP, lambda: _analysis(JEEP))
        assert cache.get(JEEP) is result
        assert cache.misses == 1

    def test_recently_used_entry_survives_evictions(self):
        cache = AnalysisCache(max_entries=3)
        for text in ("a", "b", "c"):
            cache.get_or_compute(text, lambda text=text: _analysis(text))
        cache.get("a")
        cache.get_or_compute("d", lambda: _analysis("d"))
        cache.get_or_compute("e", lambda: _analysis("e"))

        assert cache.get("a") is not None
        assert cache.get("b") is None
        assert cache.get("c") is None
        assert len(cache) == 3

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            AnalysisCache(max_entries=0)

    def test_clear(self):
        cache = AnalysisCache()
        cache.get_or_compute(JEEP, lambda: _analysis(JEEP))
        cache.clear()

        assert len(cache) == 0
        assert cache.hits == 0
        assert cache.misses == 0

    def test_cache_key(self):
        assert cache_key("abc") == cache_key("abc")
        assert cache_key("abc") != cache_key("abd")
        assert len(cache_key("")) == 64
