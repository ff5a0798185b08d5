"""Partial record store with a primary backend and a best-effort fallback."""

import logging
from typing import Dict, List, Optional, Tuple

from common.exceptions import BackendError, StoreUnavailableError
from common.types import PartialRecord
from store.backends import StorageBackend

logger = logging.getLogger(__name__)


class PartialStore:
    """
    Key-value store for partial records.

    Every call tries the primary backend first (when one is configured) and
    drops to the fallback only if the primary fails during that call; the
    choice is never remembered between calls. The two backends are not
    replicas: nothing records which of them received a given write.
    """

    def __init__(self, primary: Optional[StorageBackend], fallback: StorageBackend):
        """
        Initialize store.

        Args:
            primary: Durable backend, or None to run on the fallback only
            fallback: Ephemeral backend used when the primary errors
        """
        self.primary = primary
        self.fallback = fallback

    def put(self, key: str, record: PartialRecord) -> str:
        """
        Persist a record under key, overwriting any previous record.

        Args:
            key: Storage key (see store.keys.partial_key)
            record: Record to persist

        Returns:
            Name of the backend that accepted the write

        Raises:
            StoreUnavailableError: If the primary and the fallback both failed
        """
        body = record.to_json()

        if self.primary is not None:
            try:
                self.primary.put(key, body)
                logger.debug(f"Stored {key} via {self.primary.name}")
                return self.primary.name
            except BackendError as e:
                logger.warning(f"Primary put failed, falling back to {self.fallback.name}: {e}")

        try:
            self.fallback.put(key, body)
        except BackendError as e:
            logger.error(f"Fallback put failed for {key}: {e}")
            raise StoreUnavailableError(f"Could not store {key}: {e}") from e

        logger.debug(f"Stored {key} via {self.fallback.name}")
        return self.fallback.name

    def list_by_prefix(self, prefix: str) -> List[Tuple[str, bytes]]:
        """
        Enumerate the raw bodies of every record under prefix.

        The listing is served by exactly one backend: the primary when it can
        enumerate, otherwise the fallback. Records written to the other
        backend are not visible in that call. A key whose body cannot be read
        after listing is logged and skipped.

        Args:
            prefix: Key namespace, e.g. "partials/<escaped-fileId>/"

        Returns:
            List of (key, body) pairs in backend listing order

        Raises:
            StoreUnavailableError: If neither backend could enumerate the prefix
        """
        if self.primary is not None:
            try:
                keys = self.primary.list(prefix)
                return self._read_listed(self.primary, keys)
            except BackendError as e:
                logger.warning(f"Primary list failed for {prefix}, reading {self.fallback.name} instead: {e}")

        try:
            keys = self.fallback.list(prefix)
        except BackendError as e:
            logger.error(f"Fallback list failed for {prefix}: {e}")
            raise StoreUnavailableError(f"Could not list {prefix}: {e}") from e
        return self._read_listed(self.fallback, keys)

    def _read_listed(self, backend: StorageBackend, keys: List[str]) -> List[Tuple[str, bytes]]:
        items = []
        for key in keys:
            try:
                body = backend.get(key)
            except BackendError as e:
                logger.warning(f"Skipping {key}: read from {backend.name} failed: {e}")
                continue
            if body is None:
                logger.debug(f"Skipping {key}: vanished from {backend.name} after listing")
                continue
            items.append((key, body))
        return items

    def get(self, key: str) -> Optional[PartialRecord]:
        """
        Read one record by key.

        The primary is asked first; the fallback is asked when the primary
        fails or does not hold the key.

        Args:
            key: Storage key

        Returns:
            PartialRecord, or None if no backend holds the key

        Raises:
            StoreUnavailableError: If every backend consulted failed
            PartialParseError: If the stored body cannot be decoded
        """
        primary_failed = False

        if self.primary is not None:
            try:
                body = self.primary.get(key)
                if body is not None:
                    return PartialRecord.from_json(body)
            except BackendError as e:
                primary_failed = True
                logger.warning(f"Primary get failed for {key}, trying {self.fallback.name}: {e}")

        try:
            body = self.fallback.get(key)
        except BackendError as e:
            if primary_failed or self.primary is None:
                raise StoreUnavailableError(f"Could not read {key}: {e}") from e
            logger.warning(f"Fallback get failed for {key}: {e}")
            return None

        if body is None:
            return None
        return PartialRecord.from_json(body)

    def probe(self, prefix: str) -> Dict[str, str]:
        """
        Check whether each configured backend can enumerate a prefix.

        Returns:
            Mapping of role ("primary"/"fallback") to "ok", "error: ..." or "disabled"
        """
        status = {}
        for role, backend in (("primary", self.primary), ("fallback", self.fallback)):
            if backend is None:
                status[role] = "disabled"
                continue
            try:
                backend.list(prefix)
                status[role] = "ok"
            except BackendError as e:
                status[role] = f"error: {e}"
        return status
