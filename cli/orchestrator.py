"""Bounded concurrent upload of a file's chunks with per-chunk state tracking."""

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from common.chunk_planner import plan
from common.exceptions import InvalidChunkStateError
from common.types import ERROR, ChunkDescriptor, ChunkState
from cli.byte_sources import ByteSource
from cli.senders import ChunkSender

logger = logging.getLogger(__name__)

StateListener = Callable[[ChunkState], None]


class ChunkStateTable:
    """
    Per-index table of ChunkState cells.

    A cell is only ever replaced by a complete new ChunkState under the lock,
    so readers always get a state that was published as a whole. Listeners
    are notified outside the lock, from the publishing thread.
    """

    def __init__(self, descriptors: List[ChunkDescriptor]):
        self._cells: Dict[int, ChunkState] = {d.index: ChunkState(index=d.index) for d in descriptors}
        self._lock = threading.Lock()
        self._listeners: List[StateListener] = []

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def get(self, index: int) -> ChunkState:
        with self._lock:
            return self._cells[index]

    def snapshot(self) -> List[ChunkState]:
        """
        Get every cell at one instant.

        Returns:
            States ordered by chunk index
        """
        with self._lock:
            return [self._cells[i] for i in sorted(self._cells)]

    def transition(
        self,
        index: int,
        change: Callable[[ChunkState], ChunkState],
        require: Optional[Callable[[ChunkState], bool]] = None
    ) -> ChunkState:
        """
        Atomically replace one cell with change(current).

        Args:
            index: Chunk index
            change: Builds the new state from the current one
            require: Optional precondition on the current state

        Returns:
            The newly published state

        Raises:
            KeyError: If index is not in the table
            InvalidChunkStateError: If require rejects the current state
        """
        with self._lock:
            current = self._cells[index]
            if require is not None and not require(current):
                raise InvalidChunkStateError(
                    f"Chunk {index} is {current.status}, transition not allowed"
                )
            new_state = change(current)
            self._cells[index] = new_state

        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"State listener failed for chunk {index}: {e}", exc_info=True)
        return new_state


class _IndexCounter:
    """Shared claim counter; each call hands out the next index exactly once."""

    def __init__(self):
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def claim(self) -> int:
        with self._lock:
            return next(self._counter)


@dataclass
class UploadSession:
    """One orchestrator run: the file, its planned chunks and their states."""
    file_id: str
    source: ByteSource
    descriptors: List[ChunkDescriptor]
    table: ChunkStateTable

    @property
    def total_chunks(self) -> int:
        return len(self.descriptors)


class UploadOrchestrator:
    """
    Uploads every chunk of a file through a fixed pool of workers.

    Workers claim indices from a shared counter in increasing order and
    upload them independently; completion order is unconstrained. A failed
    chunk ends in the error state without affecting its siblings, and can be
    retried on its own afterwards.
    """

    def __init__(self, sender: ChunkSender, on_state_change: Optional[StateListener] = None):
        """
        Initialize orchestrator.

        Args:
            sender: Delivers one chunk to the store (HTTP client or in-process uploader)
            on_state_change: Optional callback invoked with every published ChunkState
        """
        self.sender = sender
        self.on_state_change = on_state_change
        self._session: Optional[UploadSession] = None

    @property
    def session(self) -> Optional[UploadSession]:
        return self._session

    def run(
        self,
        file_id: str,
        source: ByteSource,
        chunk_size: int,
        concurrency: int
    ) -> List[ChunkState]:
        """
        Upload all chunks of source and wait for every one to finish.

        Starting a run replaces any previous session, so all chunks begin in
        the pending state again.

        Args:
            file_id: Opaque file identifier
            source: Byte source of the file
            chunk_size: Maximum bytes per chunk
            concurrency: Number of workers (>= 1)

        Returns:
            Terminal state (done or error) of every chunk, ordered by index

        Raises:
            ValueError: If concurrency or chunk_size is not positive
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")

        descriptors = plan(source.size(), chunk_size)
        table = ChunkStateTable(descriptors)
        if self.on_state_change is not None:
            table.add_listener(self.on_state_change)

        session = UploadSession(file_id=file_id, source=source, descriptors=descriptors, table=table)
        self._session = session

        workers = min(concurrency, len(descriptors))
        logger.info(
            f"Uploading {file_id}: {len(descriptors)} chunk(s) of up to {chunk_size} bytes with {workers} worker(s)"
        )

        counter = _IndexCounter()
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="chunk-worker") as pool:
            futures = [pool.submit(self._worker, session, counter) for _ in range(workers)]
            for future in futures:
                future.result()

        states = table.snapshot()
        failed = [s.index for s in states if s.status == ERROR]
        if failed:
            logger.warning(f"Upload of {file_id} finished with {len(failed)} failed chunk(s): {failed}")
        else:
            logger.info(f"Upload of {file_id} finished, all {len(states)} chunk(s) stored")
        return states

    def _worker(self, session: UploadSession, counter: _IndexCounter) -> None:
        while True:
            index = counter.claim()
            if index >= session.total_chunks:
                return
            self._upload_one(session, session.descriptors[index])

    def _upload_one(self, session: UploadSession, descriptor: ChunkDescriptor) -> ChunkState:
        table = session.table
        table.transition(descriptor.index, lambda s: s.to_uploading())
        try:
            data = session.source.read(descriptor.byte_start, descriptor.byte_end)
            partial = self.sender.store_chunk(session.file_id, descriptor, session.total_chunks, data)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning(f"Chunk {descriptor.index} of {session.file_id} failed: {message}")
            return table.transition(descriptor.index, lambda s: s.to_error(message))
        return table.transition(descriptor.index, lambda s: s.to_done(partial))

    def retry(self, index: int) -> ChunkState:
        """
        Upload one failed chunk again, outside the worker pool.

        Safe alongside a running upload of other chunks. Retries of the same
        chunk must not overlap; a second concurrent retry is rejected because
        the chunk has already left the error state.

        Args:
            index: Chunk index to retry

        Returns:
            The chunk's new terminal state

        Raises:
            InvalidChunkStateError: If there is no session, the index is unknown,
                or the chunk is not in the error state
        """
        session = self._session
        if session is None:
            raise InvalidChunkStateError("No upload session to retry")
        if not 0 <= index < session.total_chunks:
            raise InvalidChunkStateError(f"Chunk {index} is not part of this upload")

        session.table.transition(index, lambda s: s.to_pending(), require=lambda s: s.status == ERROR)
        logger.info(f"Retrying chunk {index} of {session.file_id}")
        return self._upload_one(session, session.descriptors[index])

    def retry_failed(self) -> List[ChunkState]:
        """
        Retry every chunk currently in the error state, one after another.

        Returns:
            New states of the retried chunks, ordered by index
        """
        session = self._session
        if session is None:
            raise InvalidChunkStateError("No upload session to retry")
        failed = [s.index for s in session.table.snapshot() if s.status == ERROR]
        return [self.retry(index) for index in failed]

    def states(self) -> List[ChunkState]:
        """
        Get a snapshot of the current session's chunk states.

        Returns:
            States ordered by index, or an empty list before the first run
        """
        if self._session is None:
            return []
        return self._session.table.snapshot()
