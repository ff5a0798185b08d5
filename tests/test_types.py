"""Tests for shared data types."""

import json

import pytest

from common.exceptions import PartialParseError
from common.types import DONE, ERROR, PENDING, UPLOADING, ChunkState, PartialRecord


def make_record():
    return PartialRecord(
        file_id='f',
        chunk_index=0,
        total_chunks=1,
        hash='0' * 64,
        length=0,
        stored_at=1700000000000,
    )


def test_partial_record_wire_format():
    assert make_record().to_dict() == {
        'fileId': 'f',
        'chunkIndex': 0,
        'totalChunks': 1,
        'hash': '0' * 64,
        'length': 0,
        'storedAt': 1700000000000,
    }
    assert PartialRecord.from_json(make_record().to_json()) == make_record()


@pytest.mark.parametrize("body", [
    b'',
    b'[]',
    b'{"fileId": "f"}',
    json.dumps({**make_record().to_dict(), 'chunkIndex': '0'}).encode(),
    json.dumps({**make_record().to_dict(), 'length': True}).encode(),
    json.dumps({**make_record().to_dict(), 'hash': 5}).encode(),
    b'\xff\xfe',
])
def test_partial_record_rejects_malformed(body):
    with pytest.raises(PartialParseError):
        PartialRecord.from_json(body)


def test_chunk_state_transitions_replace_whole_state():
    state = ChunkState(index=3)
    assert state.status == PENDING
    assert not state.is_terminal

    uploading = state.to_uploading()
    done = uploading.to_done(make_record())
    failed = uploading.to_error('boom')
    reset = failed.to_pending()

    assert state.status == PENDING
    assert uploading.status == UPLOADING
    assert done.status == DONE and done.partial == make_record() and done.is_terminal
    assert failed.status == ERROR and failed.error == 'boom' and failed.partial is None
    assert reset.status == PENDING and reset.error is None
    assert {s.index for s in (uploading, done, failed, reset)} == {3}
