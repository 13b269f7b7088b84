"""
Shared fixtures for the reference cache tests.

Redis is replaced by ``InMemoryBackend``, a small KeyValueBackend double that
honours per-key expiration and can be switched into a failing mode.
"""

import fnmatch
import math
import time

import pytest
import redis

from reference_cache.repositories import RedisCacheRepository
from reference_cache.services import DataService, ReferenceIdGenerator

NAMESPACE = "test-ns"


class InMemoryBackend:
    """Dictionary-backed stand-in for the subset of redis.Redis we use."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._expiry: dict[str, float] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise redis.ConnectionError("backend unavailable")

    def _purge(self, name: str) -> None:
        deadline = self._expiry.get(name)
        if deadline is not None and time.monotonic() >= deadline:
            self._data.pop(name, None)
            self._expiry.pop(name, None)

    def get(self, name):
        self._check()
        self._purge(name)
        return self._data.get(name)

    def set(self, name, value, ex=None):
        self._check()
        self._data[name] = value
        if ex:
            self._expiry[name] = time.monotonic() + ex
        else:
            self._expiry.pop(name, None)
        return True

    def delete(self, *names):
        self._check()
        count = 0
        for name in names:
            self._purge(name)
            if name in self._data:
                del self._data[name]
                self._expiry.pop(name, None)
                count += 1
        return count

    def exists(self, *names):
        self._check()
        count = 0
        for name in names:
            self._purge(name)
            if name in self._data:
                count += 1
        return count

    def expire(self, name, time):  # noqa: A002 - mirrors redis-py signature
        self._check()
        self._purge(name)
        if name not in self._data:
            return False
        self._expiry[name] = _monotonic() + time
        return True

    def ttl(self, name):
        self._check()
        self._purge(name)
        if name not in self._data:
            return -2
        deadline = self._expiry.get(name)
        if deadline is None:
            return -1
        return math.ceil(deadline - _monotonic())

    def scan_iter(self, match=None, count=None):
        self._check()
        for name in list(self._data):
            self._purge(name)
        for name in list(self._data):
            if match is None or fnmatch.fnmatchcase(name, match):
                yield name

    def info(self, section=None):
        self._check()
        return {
            "redis_version": "7.2.0-inmemory",
            "used_memory_human": "1.00M",
            "connected_clients": 1,
            "total_commands_processed": 0,
            "keyspace_hits": 0,
            "keyspace_misses": 0,
        }

    def ping(self):
        self._check()
        return True

    def raw_keys(self) -> list[str]:
        return list(self._data)


def _monotonic() -> float:
    return time.monotonic()


@pytest.fixture
def backend():
    """Create an empty in-memory backend."""
    return InMemoryBackend()


@pytest.fixture
def repository(backend):
    """Create a repository bound to the in-memory backend."""
    return RedisCacheRepository(redis_client=backend, namespace=NAMESPACE)


@pytest.fixture
def generator():
    """Create a generator with a fresh counter and fixed defaults."""
    return ReferenceIdGenerator(default_prefix="CLD", random_length=6)


@pytest.fixture
def service(repository, generator):
    """Create a data service with no processing delay."""
    data_service = DataService(
        cache_store=repository,
        id_generator=generator,
        processing_delay=0,
        default_ttl=3600,
    )
    yield data_service
    data_service.shutdown(wait=True)
