"""Tests for PartialStore primary/fallback behaviour."""

import pytest

from common.exceptions import PartialParseError, StoreUnavailableError
from common.types import PartialRecord
from store.backends import InMemoryBackend
from store.keys import file_prefix, partial_key
from store.partial_store import PartialStore
from conftest import FailingBackend


def make_record(file_id='f', index=0, stored_at=1000):
    return PartialRecord(
        file_id=file_id,
        chunk_index=index,
        total_chunks=3,
        hash='ab' * 32,
        length=4,
        stored_at=stored_at,
    )


def test_put_goes_to_primary_when_healthy():
    primary, fallback = InMemoryBackend(), InMemoryBackend()
    store = PartialStore(primary=primary, fallback=fallback)

    backend = store.put(partial_key('f', 0), make_record())

    assert backend == primary.name
    assert primary.get(partial_key('f', 0)) is not None
    assert fallback.get(partial_key('f', 0)) is None


def test_put_falls_back_when_primary_fails():
    primary = FailingBackend(fail_put=True)
    fallback = InMemoryBackend()
    store = PartialStore(primary=primary, fallback=fallback)

    backend = store.put(partial_key('f', 0), make_record())

    assert backend == fallback.name
    assert PartialRecord.from_json(fallback.get(partial_key('f', 0))) == make_record()


def test_put_raises_when_both_fail():
    store = PartialStore(primary=FailingBackend(fail_put=True), fallback=FailingBackend(fail_put=True))

    with pytest.raises(StoreUnavailableError):
        store.put(partial_key('f', 0), make_record())


def test_fallback_choice_is_not_sticky():
    """Test a primary failure on one call does not divert the next call."""
    primary = FailingBackend(fail_put=True)
    fallback = InMemoryBackend()
    store = PartialStore(primary=primary, fallback=fallback)

    store.put(partial_key('f', 0), make_record(index=0))
    primary.fail_put = False
    backend = store.put(partial_key('f', 1), make_record(index=1))

    assert backend == primary.name
    assert primary.put_calls == 2


def test_put_without_primary_uses_fallback():
    fallback = InMemoryBackend()
    store = PartialStore(primary=None, fallback=fallback)

    assert store.put(partial_key('f', 0), make_record()) == fallback.name


def test_list_by_prefix_reads_primary(partial_store):
    for i in range(3):
        partial_store.put(partial_key('f', i), make_record(index=i))
    partial_store.put(partial_key('other', 0), make_record(file_id='other'))

    items = partial_store.list_by_prefix(file_prefix('f'))

    assert len(items) == 3
    assert all(key.startswith(file_prefix('f')) for key, _ in items)


def test_list_falls_back_when_primary_list_fails():
    primary = FailingBackend(fail_list=True)
    fallback = InMemoryBackend()
    primary.inner.put(partial_key('f', 0), make_record(index=0).to_json())
    fallback.put(partial_key('f', 1), make_record(index=1).to_json())
    store = PartialStore(primary=primary, fallback=fallback)

    items = store.list_by_prefix(file_prefix('f'))

    assert [key for key, _ in items] == [partial_key('f', 1)]


def test_list_views_are_mutually_exclusive():
    """Test records in the fallback are invisible while the primary can list."""
    primary, fallback = InMemoryBackend(), InMemoryBackend()
    primary.put(partial_key('f', 0), make_record(index=0).to_json())
    fallback.put(partial_key('f', 1), make_record(index=1).to_json())
    store = PartialStore(primary=primary, fallback=fallback)

    items = store.list_by_prefix(file_prefix('f'))

    assert [key for key, _ in items] == [partial_key('f', 0)]


def test_list_raises_when_both_fail():
    store = PartialStore(primary=FailingBackend(fail_list=True), fallback=FailingBackend(fail_list=True))

    with pytest.raises(StoreUnavailableError):
        store.list_by_prefix(file_prefix('f'))


def test_list_skips_unreadable_items():
    primary = FailingBackend(fail_get_keys={partial_key('f', 1)})
    for i in range(3):
        primary.inner.put(partial_key('f', i), make_record(index=i).to_json())
    store = PartialStore(primary=primary, fallback=InMemoryBackend())

    items = store.list_by_prefix(file_prefix('f'))

    assert [key for key, _ in items] == [partial_key('f', 0), partial_key('f', 2)]


def test_get_prefers_primary_then_fallback():
    primary, fallback = InMemoryBackend(), InMemoryBackend()
    fallback.put(partial_key('f', 0), make_record(stored_at=5).to_json())
    store = PartialStore(primary=primary, fallback=fallback)

    assert store.get(partial_key('f', 0)).stored_at == 5

    primary.put(partial_key('f', 0), make_record(stored_at=9).to_json())
    assert store.get(partial_key('f', 0)).stored_at == 9


def test_get_missing_returns_none(partial_store):
    assert partial_store.get(partial_key('f', 0)) is None


def test_get_uses_fallback_when_primary_errors():
    primary = FailingBackend(fail_get=True)
    fallback = InMemoryBackend()
    fallback.put(partial_key('f', 0), make_record().to_json())
    store = PartialStore(primary=primary, fallback=fallback)

    assert store.get(partial_key('f', 0)) == make_record()


def test_get_raises_when_every_backend_fails():
    store = PartialStore(primary=FailingBackend(fail_get=True), fallback=FailingBackend(fail_get=True))

    with pytest.raises(StoreUnavailableError):
        store.get(partial_key('f', 0))


def test_get_unparseable_body_raises_parse_error():
    primary = InMemoryBackend()
    primary.put(partial_key('f', 0), b'not json')
    store = PartialStore(primary=primary, fallback=InMemoryBackend())

    with pytest.raises(PartialParseError):
        store.get(partial_key('f', 0))


def test_probe_reports_each_backend():
    store = PartialStore(primary=FailingBackend(fail_list=True), fallback=InMemoryBackend())

    status = store.probe('partials/')

    assert status['primary'].startswith('error')
    assert status['fallback'] == 'ok'


def test_probe_without_primary():
    store = PartialStore(primary=None, fallback=InMemoryBackend())

    assert store.probe('partials/') == {'primary': 'disabled', 'fallback': 'ok'}
