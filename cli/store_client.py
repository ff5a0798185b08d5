"""HTTP client for the partial store server."""

import base64
import time
import uuid
from typing import Optional

import httpx

from common.checksum import verify_checksum
from common.exceptions import (
    InvalidInputError,
    PartialParseError,
    StoreUnavailableError,
    TransportError
)
from common.logging_config import get_logger
from common.types import AggregateManifest, ChunkDescriptor, PartialRecord
from cli.config import Config

logger = get_logger(__name__)


class StoreClient:
    """
    HTTP client for the store-chunk and merge operations.

    Network errors and timeouts are retried with exponential backoff. A
    response from the server, including a store failure, is never retried
    here: a failed chunk is handed back to the orchestrator as-is.
    """

    def __init__(self, config: Config):
        """
        Initialize store client.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        logger.info(f"Initialized StoreClient [base_url={config.get_base_url()}]")

    def close(self) -> None:
        self.session.close()

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on network failures.

        Args:
            method: HTTP method (GET, POST)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            TransportError: If the server could not be reached within the retry budget
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        request_id = str(uuid.uuid4())
        headers = dict(kwargs.pop('headers', None) or {})
        headers['X-Request-ID'] = request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={request_id}]")

        last_exception: Optional[Exception] = None
        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, headers=headers, **kwargs)
                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={request_id}]"
                )
                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={request_id}]"
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={request_id}]"
                    )
            except httpx.HTTPError as e:
                raise TransportError(f"{method} {endpoint} failed: {e}") from e

        if isinstance(last_exception, httpx.TimeoutException):
            raise TransportError("Request timed out. Server may be overloaded.") from last_exception
        raise TransportError("Cannot connect to partial store server. Is it running?") from last_exception

    def _parse_body(self, response: httpx.Response) -> dict:
        """
        Decode a JSON response, turning error bodies into exceptions.

        Raises:
            InvalidInputError: On 4xx responses
            StoreUnavailableError: When the server reports both backends failed
            TransportError: On any other non-success or malformed response
        """
        try:
            body = response.json()
        except ValueError:
            raise TransportError(f"HTTP {response.status_code}: response is not JSON")

        if not isinstance(body, dict):
            raise TransportError(f"HTTP {response.status_code}: unexpected response shape")

        if response.status_code == 200 and body.get('ok'):
            return body

        error = body.get('error') or f"HTTP {response.status_code}"
        code = body.get('code', 'UNKNOWN')

        if 400 <= response.status_code < 500:
            raise InvalidInputError(error)
        if code == 'STORE_UNAVAILABLE':
            raise StoreUnavailableError(error)
        raise TransportError(f"{error} (HTTP {response.status_code}, code {code})")

    def store_chunk(
        self,
        file_id: str,
        descriptor: ChunkDescriptor,
        total_chunks: int,
        data: bytes
    ) -> PartialRecord:
        """
        Send one chunk to the store-chunk operation.

        Args:
            file_id: Opaque file identifier
            descriptor: Chunk being sent
            total_chunks: Total number of chunks in the upload
            data: Chunk bytes

        Returns:
            PartialRecord stored by the server

        Raises:
            InvalidInputError: If the server rejected the request
            StoreUnavailableError: If the server could not store the record
            TransportError: On network failure or a hash that does not match data
        """
        payload = {
            'fileId': file_id,
            'chunkIndex': descriptor.index,
            'totalChunks': total_chunks,
            'chunkBytesBase64': base64.b64encode(data).decode('ascii'),
        }
        response = self._request_with_retry('POST', '/upload-chunk', json=payload)
        body = self._parse_body(response)
        try:
            record = PartialRecord.from_dict(body['partial'])
        except (KeyError, PartialParseError) as e:
            raise TransportError(f"Malformed store-chunk response: {e}") from e

        if not verify_checksum(data, record.hash):
            raise TransportError(
                f"Chunk {descriptor.index} of {file_id}: stored hash does not match the bytes sent"
            )
        return record

    def merge(self, file_id: str) -> AggregateManifest:
        """
        Fetch the aggregate manifest of a file.

        Args:
            file_id: Opaque file identifier

        Returns:
            AggregateManifest reported by the server
        """
        response = self._request_with_retry('GET', '/merge-results', params={'fileId': file_id})
        body = self._parse_body(response)
        try:
            return AggregateManifest.from_dict(body['aggregate'])
        except (KeyError, PartialParseError) as e:
            raise TransportError(f"Malformed merge response: {e}") from e
