"""
Tests for the Redis cache repository against the in-memory backend.
"""

import fnmatch
import json
import time
from datetime import datetime, timedelta

import pytest
import redis

from reference_cache.entities import DATA_ENTITY, CacheEntry, DataEntity
from reference_cache.errors import BackendUnavailableError
from reference_cache.protocols import CacheStore, KeyValueBackend
from reference_cache.repositories import RedisCacheRepository

from conftest import NAMESPACE, InMemoryBackend


def _entry(reference_id: str, content=None, **kwargs) -> CacheEntry:
    return CacheEntry(
        reference_id=reference_id,
        data_type=kwargs.pop("data_type", "CUSTOM"),
        content={"value": reference_id} if content is None else content,
        **kwargs,
    )


def _expired_entry(reference_id: str) -> CacheEntry:
    # expires_at is in the past while the backend key still has a minute left
    return _entry(reference_id, ttl_seconds=60, created_at=datetime.now() - timedelta(hours=1))


def test_satisfies_protocols(repository, backend):
    """Test structural conformance of the repository and the backend double."""
    assert isinstance(repository, CacheStore)
    assert isinstance(backend, KeyValueBackend)


def test_key_namespacing(repository, backend):
    """Test the <namespace>:data:<id> key scheme."""
    assert repository.put("CLD-1", _entry("CLD-1"))
    assert backend.raw_keys() == [f"{NAMESPACE}:data:CLD-1"]
    assert repository.metadata_key("CLD-1") == f"{NAMESPACE}:metadata:CLD-1"
    assert repository.data_key_pattern == f"{NAMESPACE}:data:*"


@pytest.mark.parametrize(
    "content",
    [
        {"bucket": "uploads", "size": 1024, "tags": ["a", "b"]},
        [1, 2.5, "three", None, {"nested": True}],
        "plain string",
        42,
        True,
    ],
)
def test_round_trip(repository, content):
    """Test that content and type tag survive a put/get cycle."""
    entry = _entry("CLD-RT", content=content, data_type="AZURE_UPLOAD", ttl_seconds=300)

    assert repository.put("CLD-RT", entry)
    loaded = repository.get("CLD-RT")

    assert loaded is not None
    assert loaded.content == content
    assert loaded.data_type == "AZURE_UPLOAD"


def test_round_trip_data_entity(repository):
    """Test that DATA_ENTITY content comes back as a DataEntity."""
    entity = DataEntity(reference_id="CLD-E", name="n", category="c")
    repository.put("CLD-E", _entry("CLD-E", content=entity, data_type=DATA_ENTITY))

    loaded = repository.get("CLD-E")
    assert isinstance(loaded.content, DataEntity)
    assert loaded.content == entity


def test_put_sets_backend_expiration(repository):
    """Test that a positive TTL becomes a backend expiration."""
    repository.put("CLD-1", _entry("CLD-1", ttl_seconds=120))
    assert 0 < repository.get_ttl("CLD-1") <= 120


def test_put_without_ttl_has_no_backend_expiration(repository):
    """Test that a missing TTL writes a persistent key."""
    repository.put("CLD-1", _entry("CLD-1", ttl_seconds=None))

    assert repository.exists("CLD-1")
    assert repository.get_ttl("CLD-1") == -1
    assert repository.get("CLD-1") is not None


def test_put_serialization_failure_returns_false(repository, backend):
    """Test that unserializable content is reported, not raised."""
    assert repository.put("CLD-1", _entry("CLD-1", content=object())) is False
    assert backend.raw_keys() == []


def test_put_backend_failure_returns_false(repository, backend):
    """Test that a backend error is reported, not raised."""
    backend.fail = True
    assert repository.put("CLD-1", _entry("CLD-1")) is False


def test_get_missing_returns_none(repository):
    """Test reading an unknown reference ID."""
    assert repository.get("CLD-missing") is None


def test_get_undecodable_returns_none(repository, backend):
    """Test that garbage under a data key reads as absent."""
    backend.set(f"{NAMESPACE}:data:CLD-bad", "not json")
    assert repository.get("CLD-bad") is None


def test_get_backend_failure_returns_none(repository, backend):
    """Test that a backend error on read reads as absent."""
    repository.put("CLD-1", _entry("CLD-1"))
    backend.fail = True
    assert repository.get("CLD-1") is None


def test_get_deletes_expired_entry(repository):
    """Test lazy expiration: exists until read, gone after."""
    repository.put("CLD-old", _expired_entry("CLD-old"))

    assert repository.exists("CLD-old")
    assert repository.get("CLD-old") is None
    assert not repository.exists("CLD-old")


def test_expiration_after_ttl_elapses(repository):
    """Test that a one-second entry is absent two seconds later."""
    repository.put("CLD-short", _entry("CLD-short", ttl_seconds=1))
    time.sleep(2)

    assert repository.get("CLD-short") is None
    assert not repository.exists("CLD-short")


def test_delete_is_idempotent(repository):
    """Test true then false on repeated deletes."""
    repository.put("CLD-1", _entry("CLD-1"))

    assert repository.delete("CLD-1") is True
    assert repository.delete("CLD-1") is False
    assert repository.delete("CLD-never") is False


def test_set_and_get_ttl(repository):
    """Test direct expiration manipulation."""
    repository.put("CLD-1", _entry("CLD-1", ttl_seconds=None))

    assert repository.set_ttl("CLD-1", 30)
    assert 0 < repository.get_ttl("CLD-1") <= 30


def test_ttl_on_missing_key(repository):
    """Test TTL operations on absent keys."""
    assert repository.set_ttl("CLD-missing", 30) is False
    assert repository.get_ttl("CLD-missing") == -1


def test_ttl_backend_failure(repository, backend):
    """Test TTL operations while the backend is down."""
    backend.fail = True
    assert repository.set_ttl("CLD-1", 30) is False
    assert repository.get_ttl("CLD-1") == -1
    assert repository.exists("CLD-1") is False


def test_find_by_pattern_omits_dead_entries(repository, backend):
    """Test that expired, undecodable and non-data keys are skipped."""
    for reference_id in ("CLD-1", "CLD-2", "AZR-1"):
        repository.put(reference_id, _entry(reference_id))
    repository.put("CLD-old", _expired_entry("CLD-old"))
    backend.set(f"{NAMESPACE}:data:CLD-bad", "{")
    repository.put_with_metadata("DOC-1", _entry("DOC-1"), {"source": "upload"})

    found = repository.find_by_pattern(f"{NAMESPACE}:*")

    assert set(found) == {"CLD-1", "CLD-2", "AZR-1", "DOC-1"}
    assert found["AZR-1"].content == {"value": "AZR-1"}
    assert not repository.exists("CLD-old")


def test_find_by_pattern_narrow_glob(repository):
    """Test restricting a scan to one prefix."""
    for reference_id in ("CLD-1", "AZR-1", "AZR-2"):
        repository.put(reference_id, _entry(reference_id))

    found = repository.find_by_pattern(f"{NAMESPACE}:data:AZR-*")
    assert set(found) == {"AZR-1", "AZR-2"}


def test_find_by_pattern_backend_failure(repository, backend):
    """Test that a failed scan yields an empty mapping."""
    repository.put("CLD-1", _entry("CLD-1"))
    backend.fail = True
    assert repository.find_by_pattern(repository.data_key_pattern) == {}


def test_clear_all_only_touches_namespace(repository, backend):
    """Test that keys outside the namespace survive a clear."""
    repository.put_with_metadata("CLD-1", _entry("CLD-1"), {"k": "v"})
    repository.put("CLD-2", _entry("CLD-2"))
    backend.set("other-app:data:CLD-1", "keep")

    assert repository.clear_all() is True
    assert backend.raw_keys() == ["other-app:data:CLD-1"]


def test_clear_all_empty_is_success(repository):
    """Test that clearing nothing still succeeds."""
    assert repository.clear_all() is True


def test_clear_all_backend_failure(repository, backend, monkeypatch):
    """Test that a failed bulk delete is reported."""
    repository.put("CLD-1", _entry("CLD-1"))

    def failing_delete(*names):
        raise redis.ConnectionError("gone")

    monkeypatch.setattr(backend, "delete", failing_delete)
    assert repository.clear_all() is False


def test_metadata_sidecar(repository):
    """Test sidecar metadata storage with the entry's TTL."""
    assert repository.put_with_metadata("CLD-1", _entry("CLD-1", ttl_seconds=90), {"rows": 12})

    assert repository.get_metadata("CLD-1") == {"rows": 12}
    assert 0 < repository.client.ttl(repository.metadata_key("CLD-1")) <= 90


def test_metadata_sidecar_not_written_when_empty(repository, backend):
    """Test that empty metadata writes only the entry."""
    assert repository.put_with_metadata("CLD-1", _entry("CLD-1"), {})
    assert repository.get_metadata("CLD-1") is None
    assert backend.raw_keys() == [f"{NAMESPACE}:data:CLD-1"]


def test_metadata_sidecar_skipped_when_entry_fails(repository, backend):
    """Test that a failed entry write stores no sidecar."""
    assert not repository.put_with_metadata("CLD-1", _entry("CLD-1", content=object()), {"a": 1})
    assert backend.raw_keys() == []


def test_metadata_sidecar_survives_entry_delete(repository):
    """Test that the sidecar is independent of its entry."""
    repository.put_with_metadata("CLD-1", _entry("CLD-1"), {"a": 1})
    repository.delete("CLD-1")

    assert repository.get_metadata("CLD-1") == {"a": 1}


def test_get_metadata_undecodable(repository, backend):
    """Test garbage under a metadata key."""
    backend.set(f"{NAMESPACE}:metadata:CLD-1", "{nope")
    assert repository.get_metadata("CLD-1") is None


def test_stats(repository):
    """Test server fields plus namespace key count."""
    repository.put("CLD-1", _entry("CLD-1"))
    repository.put_with_metadata("CLD-2", _entry("CLD-2"), {"a": 1})

    stats = repository.stats()

    assert stats["redis_version"] == "7.2.0-inmemory"
    assert stats["used_memory"] == "1.00M"
    assert stats["application_keys_count"] == 3
    assert stats["namespace"] == NAMESPACE


def test_stats_survives_info_failure(repository, backend, monkeypatch):
    """Test that a failing INFO does not hide the key count."""
    repository.put("CLD-1", _entry("CLD-1"))

    def failing_info(section=None):
        raise redis.ConnectionError("no info")

    monkeypatch.setattr(backend, "info", failing_info)
    stats = repository.stats()

    assert "error" in stats
    assert stats["application_keys_count"] == 1


def test_health_check(repository, backend):
    """Test ping-based health."""
    assert repository.health_check() is True
    backend.fail = True
    assert repository.health_check() is False


def test_create_verify_fails_fast():
    """Test that an unreachable backend is fatal when verification is requested."""
    backend = InMemoryBackend()
    backend.fail = True

    with pytest.raises(BackendUnavailableError):
        RedisCacheRepository.create(redis_client=backend, namespace=NAMESPACE, verify=True)


def test_bytes_responses_are_decoded(repository, backend):
    """Test clients that return bytes instead of str."""
    entry = _entry("CLD-1")
    backend.set(f"{NAMESPACE}:data:CLD-1", entry.to_json().encode())
    backend.set(f"{NAMESPACE}:metadata:CLD-1", json.dumps({"a": 1}).encode())

    assert repository.get("CLD-1").content == {"value": "CLD-1"}
    assert repository.get_metadata("CLD-1") == {"a": 1}


class UndecodableBackend(InMemoryBackend):
    """Backend that fails the way a decoding redis-py client does on binary values."""

    def get(self, name):
        value = super().get(name)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def scan_iter(self, match=None, count=None):
        self._check()
        for raw in list(self._data):
            name = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            if match is None or fnmatch.fnmatchcase(name, match):
                yield name


def test_non_utf8_values_read_as_absent(repository, backend):
    """Test that binary garbage under data and metadata keys reads as absent."""
    backend.set(f"{NAMESPACE}:data:CLD-1", b"\xff\xfe garbage")
    backend.set(f"{NAMESPACE}:metadata:CLD-1", b"\x80{}")

    assert repository.get("CLD-1") is None
    assert repository.get_metadata("CLD-1") is None
    assert repository.find_by_pattern(repository.data_key_pattern) == {}


def test_decoding_client_errors_read_as_absent():
    """Test a client whose own response decoding fails."""
    backend = UndecodableBackend()
    repository = RedisCacheRepository(redis_client=backend, namespace=NAMESPACE)
    backend.set(f"{NAMESPACE}:data:CLD-1", b"\xff\xfe garbage")
    backend.set(f"{NAMESPACE}:metadata:CLD-1", b"\x80{}")

    assert repository.get("CLD-1") is None
    assert repository.get_metadata("CLD-1") is None


def test_decoding_client_key_errors_yield_empty_scan():
    """Test that an undecodable key name empties the scan instead of raising."""
    backend = UndecodableBackend()
    repository = RedisCacheRepository(redis_client=backend, namespace=NAMESPACE)
    repository.put("CLD-1", _entry("CLD-1"))
    backend.set(f"{NAMESPACE}:data:".encode() + b"\xff", "x")

    assert repository.find_by_pattern(repository.data_key_pattern) == {}
    assert repository.keys(f"{NAMESPACE}:*") == []
    assert repository.stats()["application_keys_count"] == 0


def test_get_metadata_rejects_non_mapping(repository, backend):
    """Test that sidecar JSON which is not an object reads as absent."""
    backend.set(f"{NAMESPACE}:metadata:CLD-1", json.dumps([1, 2, 3]))
    assert repository.get_metadata("CLD-1") is None
