"""Unit tests for StoreClient."""

import base64
import hashlib
import json

import httpx
import pytest

from common.exceptions import InvalidInputError, StoreUnavailableError, TransportError
from common.types import ChunkDescriptor
from cli.store_client import StoreClient


def partial_body(file_id='f', index=0, data=b'abc'):
    return {
        'fileId': file_id,
        'chunkIndex': index,
        'totalChunks': 2,
        'hash': hashlib.sha256(data).hexdigest(),
        'length': len(data),
        'storedAt': 1700000000000,
    }


@pytest.fixture
def mock_transport_success():
    """Mock transport that echoes a stored partial and serves a manifest."""
    def handler(request):
        if request.url.path == '/upload-chunk' and request.method == 'POST':
            payload = json.loads(request.content)
            data = base64.b64decode(payload['chunkBytesBase64'])
            return httpx.Response(200, json={
                'ok': True,
                'partial': partial_body(payload['fileId'], payload['chunkIndex'], data),
            })
        elif request.url.path == '/merge-results' and request.method == 'GET':
            file_id = request.url.params['fileId']
            partials = [partial_body(file_id, 0), partial_body(file_id, 1)]
            return httpx.Response(200, json={
                'ok': True,
                'aggregate': {
                    'fileId': file_id,
                    'totalChunksFound': 2,
                    'hashes': [p['hash'] for p in partials],
                    'partials': partials,
                    'generatedAt': 1700000000001,
                },
            })

        return httpx.Response(404, json={'ok': False, 'error': 'not found', 'code': 'NOT_FOUND'})

    return httpx.MockTransport(handler)


def client_for(config, transport):
    client = StoreClient(config)
    client.session = httpx.Client(transport=transport, base_url='http://test')
    return client


@pytest.fixture
def client_with_mock(temp_config, mock_transport_success):
    """Create StoreClient with mocked HTTP transport."""
    return client_for(temp_config, mock_transport_success)


def test_store_chunk_success(client_with_mock):
    record = client_with_mock.store_chunk('f', ChunkDescriptor(1, 3, 6), 2, b'abc')

    assert record.file_id == 'f'
    assert record.chunk_index == 1
    assert record.hash == hashlib.sha256(b'abc').hexdigest()
    assert record.length == 3


def test_store_chunk_sends_expected_payload(temp_config):
    seen = {}

    def handler(request):
        seen['body'] = json.loads(request.content)
        seen['request_id'] = request.headers.get('X-Request-ID')
        return httpx.Response(200, json={'ok': True, 'partial': partial_body()})

    client = client_for(temp_config, httpx.MockTransport(handler))
    client.store_chunk('f', ChunkDescriptor(0, 0, 3), 2, b'abc')

    assert seen['body'] == {
        'fileId': 'f',
        'chunkIndex': 0,
        'totalChunks': 2,
        'chunkBytesBase64': base64.b64encode(b'abc').decode('ascii'),
    }
    assert seen['request_id']


def test_merge_success(client_with_mock):
    manifest = client_with_mock.merge('doc')

    assert manifest.file_id == 'doc'
    assert manifest.total_chunks_found == 2
    assert [p.chunk_index for p in manifest.partials] == [0, 1]


def test_store_unavailable_is_not_retried(temp_config):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500, json={'ok': False, 'error': 'both down', 'code': 'STORE_UNAVAILABLE'})

    client = client_for(temp_config, httpx.MockTransport(handler))

    with pytest.raises(StoreUnavailableError):
        client.store_chunk('f', ChunkDescriptor(0, 0, 1), 1, b'x')
    assert len(calls) == 1


def test_invalid_input_response(temp_config):
    def handler(request):
        return httpx.Response(400, json={'ok': False, 'error': 'missing fileId', 'code': 'INVALID_INPUT'})

    client = client_for(temp_config, httpx.MockTransport(handler))

    with pytest.raises(InvalidInputError, match='missing fileId'):
        client.merge('')


def test_internal_error_response(temp_config):
    def handler(request):
        return httpx.Response(500, json={'ok': False, 'error': 'boom', 'code': 'INTERNAL_ERROR'})

    client = client_for(temp_config, httpx.MockTransport(handler))

    with pytest.raises(TransportError):
        client.merge('f')


def test_non_json_response(temp_config):
    def handler(request):
        return httpx.Response(502, text='<html>Bad Gateway</html>')

    client = client_for(temp_config, httpx.MockTransport(handler))

    with pytest.raises(TransportError):
        client.store_chunk('f', ChunkDescriptor(0, 0, 1), 1, b'x')


def test_malformed_partial_response(temp_config):
    def handler(request):
        return httpx.Response(200, json={'ok': True, 'partial': {'fileId': 'f'}})

    client = client_for(temp_config, httpx.MockTransport(handler))

    with pytest.raises(TransportError):
        client.store_chunk('f', ChunkDescriptor(0, 0, 1), 1, b'x')


def test_connect_error_retried_then_raised(temp_config, monkeypatch):
    monkeypatch.setattr('cli.store_client.time.sleep', lambda s: None)
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = client_for(temp_config, httpx.MockTransport(handler))

    with pytest.raises(TransportError, match='Cannot connect'):
        client.merge('f')
    assert len(attempts) == temp_config.get_retry_config()['max_retries'] + 1


def test_timeout_recovers_on_retry(temp_config, monkeypatch):
    monkeypatch.setattr('cli.store_client.time.sleep', lambda s: None)
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, json={'ok': True, 'partial': partial_body()})

    client = client_for(temp_config, httpx.MockTransport(handler))

    record = client.store_chunk('f', ChunkDescriptor(0, 0, 3), 2, b'abc')

    assert record.length == 3
    assert len(attempts) == 2
    assert attempts[0].headers['X-Request-ID'] == attempts[1].headers['X-Request-ID']


def test_store_chunk_hash_mismatch(temp_config):
    """Test a stored hash that does not match the sent bytes is reported."""
    def handler(request):
        return httpx.Response(200, json={'ok': True, 'partial': partial_body(data=b'other')})

    client = client_for(temp_config, httpx.MockTransport(handler))

    with pytest.raises(TransportError, match='does not match'):
        client.store_chunk('f', ChunkDescriptor(0, 0, 3), 2, b'abc')
