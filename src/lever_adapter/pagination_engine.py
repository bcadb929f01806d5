"""
PaginationEngine module driving the fetch-decode-emit loop for one collection
"""

import logging
from typing import Callable

from lever_adapter.endpoint_registry import SyncTarget
from lever_adapter.http_client import HTTPClient
from lever_adapter.rate_limiter import RateLimiter
from lever_adapter.record_schemas import LeverRecord, RecordDecoderRegistry


logger = logging.getLogger(__name__)

Emit = Callable[[LeverRecord], None]


class PaginationEngine:
    """Walks a cursor-paginated collection until the server reports no more pages"""

    def __init__(self, http_client: HTTPClient, rate_limiter: RateLimiter,
                 decoders: RecordDecoderRegistry):
        self.http_client = http_client
        self.rate_limiter = rate_limiter
        self.decoders = decoders

    def drain(self, target: SyncTarget, emit: Emit) -> int:
        """
        Fetch every page of the target and emit its records in server order

        The target's cursor is advanced by the HTTP client after each page;
        the loop ends on the first page reporting hasNext=false.

        Args:
            target: Bound endpoint, normally with a fresh cursor
            emit: Called once per decoded record

        Returns:
            Number of records emitted

        Raises:
            ConfigurationError: If the entity type has no decoder (before any request)
            TransportError, NotFoundError, UnexpectedStatusError, DecodeError:
                Propagated from the HTTP client or the decoder
        """
        decode = self.decoders.get_decoder(target.entity_type)

        records_emitted = 0
        page_num = 0
        while True:
            self.rate_limiter.acquire()
            envelope = self.http_client.fetch_page(target)
            page_num += 1

            records = decode(envelope.data)
            for record in records:
                emit(record)
            records_emitted += len(records)

            logger.debug(f"Page {page_num} of {target.resolved_path()} emitted {len(records)} records")

            if not target.cursor.has_next:
                break

        return records_emitted
