"""Tests for CLI command parsing."""

import pytest

from cli.models import (
    ConfigCommand,
    MergeCommand,
    RetryCommand,
    RetryFailedCommand,
    StatusCommand,
    UploadCommand,
)
from cli.parser import ParseError, parse_command


def test_parse_upload():
    assert parse_command('upload data/file.bin') == UploadCommand(path='data/file.bin')


def test_parse_upload_with_file_id():
    assert parse_command('upload data/file.bin my-id') == UploadCommand(path='data/file.bin', file_id='my-id')


def test_parse_upload_quoted_path():
    cmd = parse_command('upload "my docs/report 1.pdf"')
    assert cmd.path == 'my docs/report 1.pdf'
    assert cmd.file_id is None


@pytest.mark.parametrize("line", ['upload', 'upload a b c'])
def test_parse_upload_wrong_arity(line):
    with pytest.raises(ParseError):
        parse_command(line)


def test_parse_status_and_retry_failed():
    assert parse_command('status') == StatusCommand()
    assert parse_command('retry-failed') == RetryFailedCommand()


def test_parse_status_rejects_arguments():
    with pytest.raises(ParseError):
        parse_command('status now')


def test_parse_retry():
    assert parse_command('retry 3') == RetryCommand(index=3)


@pytest.mark.parametrize("line", ['retry', 'retry x', 'retry -1', 'retry 1 2'])
def test_parse_retry_invalid(line):
    with pytest.raises(ParseError):
        parse_command(line)


def test_parse_merge():
    assert parse_command('merge') == MergeCommand()
    assert parse_command('merge doc-1') == MergeCommand(file_id='doc-1')


def test_parse_config():
    assert parse_command('config') == ConfigCommand()
    assert parse_command('config concurrency 8') == ConfigCommand(key='concurrency', value='8')


def test_parse_config_single_argument():
    with pytest.raises(ParseError):
        parse_command('config concurrency')


def test_parse_unknown_command():
    with pytest.raises(ParseError, match='Unknown command'):
        parse_command('download x')


def test_parse_empty_and_bad_quotes():
    with pytest.raises(ParseError):
        parse_command('   ')
    with pytest.raises(ParseError):
        parse_command('upload "unterminated')
