"""Tests for logging setup and payload filtering."""

import logging

from common.logging_config import ChunkPayloadFilter, setup_logging


def make_record(msg, args=()):
    return logging.LogRecord('test', logging.INFO, __file__, 1, msg, args, None)


def test_filter_truncates_long_payload():
    payload = 'A' * 200
    record = make_record(f'body={{"chunkBytesBase64": "{payload}"}}')

    assert ChunkPayloadFilter().filter(record) is True
    assert payload not in record.msg
    assert '<200 chars>' in record.msg


def test_filter_handles_alias_and_args():
    payload = 'QUJD' * 20
    record = make_record('request %s', (f"chunkBase64='{payload}'",))

    ChunkPayloadFilter().filter(record)

    assert payload not in record.args[0]


def test_filter_leaves_short_values_alone():
    record = make_record('chunkBytesBase64=aGk=')

    ChunkPayloadFilter().filter(record)

    assert record.msg == 'chunkBytesBase64=aGk='


def test_setup_logging_is_idempotent():
    logger = setup_logging('spfe-test-component', log_level='DEBUG')
    again = setup_logging('spfe-test-component', log_level='DEBUG')

    assert logger is again
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
