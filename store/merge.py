"""Rebuilds the ordered aggregate manifest of a file from its stored partials."""

import logging
from typing import Dict, List

from common.exceptions import InvalidInputError, PartialParseError
from common.types import AggregateManifest, PartialRecord, now_ms
from store.keys import file_prefix
from store.partial_store import PartialStore

logger = logging.getLogger(__name__)


class MergeAggregator:
    """
    Lists every partial record of a file and orders them by chunk index.

    Missing chunks are not an error: the manifest reports whatever was found.
    """

    def __init__(self, store: PartialStore):
        self.store = store

    def merge(self, file_id: str) -> AggregateManifest:
        """
        Build the aggregate manifest for file_id.

        Records that cannot be decoded are logged and skipped. When two
        records carry the same chunk index, the one with the latest storedAt
        wins; on a tie the record listed later wins.

        Args:
            file_id: Opaque file identifier

        Returns:
            AggregateManifest with partials sorted by chunk index

        Raises:
            InvalidInputError: If file_id is empty
            StoreUnavailableError: If neither backend could list the file
        """
        if not file_id:
            raise InvalidInputError("missing fileId")

        by_index: Dict[int, PartialRecord] = {}
        for key, body in self.store.list_by_prefix(file_prefix(file_id)):
            try:
                record = PartialRecord.from_json(body)
            except PartialParseError as e:
                logger.warning(f"Dropping unparseable partial {key}: {e}")
                continue

            current = by_index.get(record.chunk_index)
            if current is not None:
                logger.warning(
                    f"Duplicate partials for chunk {record.chunk_index} of {file_id} "
                    f"(storedAt {current.stored_at} vs {record.stored_at})"
                )
                if record.stored_at < current.stored_at:
                    continue
            by_index[record.chunk_index] = record

        partials: List[PartialRecord] = [by_index[i] for i in sorted(by_index)]

        logger.info(f"Merged {len(partials)} partial(s) for {file_id}")
        return AggregateManifest(
            file_id=file_id,
            total_chunks_found=len(partials),
            hashes=[p.hash for p in partials],
            partials=partials,
            generated_at=now_ms(),
        )
