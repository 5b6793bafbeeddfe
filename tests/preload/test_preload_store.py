"""Tests for PreloadBackedStore: fallback loads and downgrade protection."""
from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from mtasts_cache.cache.policy_cache import PolicyCache
from mtasts_cache.domain.errors import DowngradeRejected, NoPolicyError, StorageError
from mtasts_cache.domain.policy import Mode, Policy, RecordSource
from mtasts_cache.preload.preload_list import PreloadEntry, PreloadList, load_list
from mtasts_cache.preload.store import PRELOADED_ID, PreloadBackedStore
from mtasts_cache.store.ram_store import RAMPolicyStore

LIST_TIME = datetime(2014, 6, 6, 14, 30, 16, tzinfo=timezone.utc)


class BrokenStore(RAMPolicyStore):
    def load(self, key):
        raise StorageError("I/O error")


@pytest.fixture()
def list_clock(clock):
    clock.now = LIST_TIME
    return clock


@pytest.fixture()
def plist(sample_list_text) -> PreloadList:
    return load_list(sample_list_text)


@pytest.fixture()
def store(plist, list_clock) -> PreloadBackedStore:
    return PreloadBackedStore(RAMPolicyStore(), plist, clock=list_clock)


def _later_list(plist: PreloadList, hours: int = 1, **changes) -> PreloadList:
    return replace(
        plist,
        timestamp=plist.timestamp + timedelta(hours=hours),
        expires=plist.expires + timedelta(hours=hours),
        **changes,
    )


class TestLoad:

    def test_inner_record_wins(self, store, enforce_policy, list_clock):
        store.store("gmail.com", "real", list_clock(), enforce_policy)
        record = store.load("gmail.com")
        assert record.id == "real"
        assert record.policy == enforce_policy
        assert record.source is RecordSource.DNS

    def test_falls_back_to_list(self, store, list_clock):
        record = store.load("gmail.com")
        assert record.id == PRELOADED_ID
        assert record.source is RecordSource.PRELOAD
        assert record.fetch_time == list_clock()
        assert record.policy == Policy(
            mode=Mode.TESTING, max_age=3600, mx=("*.mail.google.com",)
        )

    def test_preloaded_data_is_not_written_back(self, store):
        store.load("gmail.com")
        assert store.list() == []

    def test_absent_everywhere(self, store):
        with pytest.raises(NoPolicyError):
            store.load("unknown.example")

    def test_expired_list_is_ignored(self, store, list_clock):
        list_clock.advance(hours=2)
        with pytest.raises(NoPolicyError):
            store.load("gmail.com")

    def test_zero_max_age_is_rejected(self, store, plist, list_clock):
        list_clock.now = plist.expires
        with pytest.raises(NoPolicyError):
            store.load("gmail.com")

    def test_storage_error_does_not_fall_back(self, plist, list_clock):
        store = PreloadBackedStore(BrokenStore(), plist, clock=list_clock)
        with pytest.raises(StorageError):
            store.load("gmail.com")


class TestUpdate:

    def test_newer_list_replaces_active(self, store, plist):
        newer = _later_list(plist, entries={"new.example": PreloadEntry(mode=Mode.ENFORCE)})
        store.update(newer)
        assert store.active_list is newer
        assert store.load("new.example").policy.mode is Mode.ENFORCE

    def test_same_timestamp_is_accepted(self, store, plist):
        same = replace(plist, author="re-signed")
        store.update(same)
        assert store.active_list is same

    def test_expired_list_rejected(self, store, plist):
        expired = replace(
            plist,
            timestamp=plist.timestamp + timedelta(minutes=1),
            expires=LIST_TIME - timedelta(seconds=1),
            entries={"only-in-rejected.example": PreloadEntry(mode=Mode.ENFORCE)},
        )
        with pytest.raises(DowngradeRejected):
            store.update(expired)
        assert store.active_list is plist
        for _ in range(2):
            with pytest.raises(NoPolicyError):
                store.load("only-in-rejected.example")

    def test_older_list_rejected_even_if_unexpired(self, store, plist):
        newer = _later_list(plist, hours=1)
        store.update(newer)
        older = replace(plist, expires=plist.expires + timedelta(days=30))
        with pytest.raises(DowngradeRejected):
            store.update(older)
        assert store.active_list is newer

    def test_concurrent_loads_during_updates(self, store, plist):
        errors: list[Exception] = []
        lists = [_later_list(plist, hours=h) for h in range(1, 51)]

        def reader():
            try:
                for _ in range(200):
                    assert store.load("gmail.com").source is RecordSource.PRELOAD
            except Exception as exc:  # surfaced through errors below
                errors.append(exc)

        def writer():
            for newer in lists:
                store.update(newer)

        threads = [threading.Thread(target=reader) for _ in range(8)]
        threads.append(threading.Thread(target=writer))
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert errors == []
        assert store.active_list is lists[-1]


class TestWithPolicyCache:

    def test_preloaded_policy_served_without_marker(
        self, store, resolver, fetcher, list_clock
    ):
        cache = PolicyCache(store, resolver=resolver, fetcher=fetcher, clock=list_clock)
        policy = cache.get("gmail.com")
        assert policy == Policy(mode=Mode.TESTING, max_age=3600, mx=("*.mail.google.com",))
        assert fetcher.calls == []

    def test_published_policy_replaces_preloaded(
        self, store, resolver, fetcher, list_clock
    ):
        published = Policy(mode=Mode.ENFORCE, max_age=86400, mx=("*.override.google.com",))
        resolver.zones["_mta-sts.gmail.com"] = ["v=STSv1;id=123"]
        fetcher.policies["gmail.com"] = published
        cache = PolicyCache(store, resolver=resolver, fetcher=fetcher, clock=list_clock)

        assert cache.get("gmail.com") == published
        assert fetcher.calls == ["gmail.com"]
        assert store.inner.load("gmail.com").id == "123"

    def test_expired_list_yields_no_policy(self, store, resolver, fetcher, list_clock):
        list_clock.advance(hours=2)
        cache = PolicyCache(store, resolver=resolver, fetcher=fetcher, clock=list_clock)
        with pytest.raises(NoPolicyError):
            cache.get("gmail.com")
