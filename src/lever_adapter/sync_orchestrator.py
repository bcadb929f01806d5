"""
SyncOrchestrator module for high-level synchronisation of one endpoint

Direct endpoints are drained once as a flat collection. List-driven endpoints
are drained once per parent key, skipping keys already recorded by the
checkpoint store and persisting progress after every completed key.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import requests
import requests_cache

from lever_adapter.config_loader import ConfigurationError, ExtractConfig, CacheConfig
from lever_adapter.endpoint_registry import EndpointDescriptor, SyncMode, get_endpoint
from lever_adapter.http_client import HTTPClient, NotFoundError
from lever_adapter.rate_limiter import RateLimiter
from lever_adapter.record_schemas import RecordDecoderRegistry
from lever_adapter.pagination_engine import PaginationEngine, Emit
from lever_adapter.checkpoint_store import CheckpointStore
from lever_adapter.key_source import load_parent_keys
from lever_adapter.output_sink import JsonLinesSink


logger = logging.getLogger(__name__)


@dataclass
class SyncServices:
    """Collaborators constructed once at startup and shared by a run"""
    http_client: HTTPClient
    rate_limiter: RateLimiter
    decoders: RecordDecoderRegistry
    engine: PaginationEngine
    sink: JsonLinesSink

    def close(self) -> None:
        self.http_client.close_connection()
        self.sink.close()


def build_session(cache: CacheConfig) -> requests.Session:
    """Plain session, or a cached one for development runs"""
    if not cache.enabled:
        return requests.Session()

    cache.directory.mkdir(parents=True, exist_ok=True)
    logger.info(f"Request caching enabled with expiration of {cache.expiration_seconds} seconds")
    return requests_cache.CachedSession(
        str(cache.directory / 'lever_cache'),
        expire_after=cache.expiration_seconds
    )


def build_services(config: ExtractConfig) -> SyncServices:
    """Construct the collaborators shared by one run"""
    http_client = HTTPClient(
        token=config.token,
        base_url=config.base_url,
        timeout_seconds=config.timeout_seconds,
        session=build_session(config.cache)
    )
    rate_limiter = RateLimiter(config.request_interval_seconds)
    decoders = RecordDecoderRegistry()

    return SyncServices(
        http_client=http_client,
        rate_limiter=rate_limiter,
        decoders=decoders,
        engine=PaginationEngine(http_client, rate_limiter, decoders),
        sink=JsonLinesSink.open(config.output_path)
    )


@dataclass
class SyncSummary:
    """Counters reported at the end of a run"""
    endpoint: str
    keys_processed: int = 0
    keys_skipped: int = 0
    keys_missing: int = 0
    records_emitted: int = 0


class DirectSyncOrchestrator:
    """Drains a top-level collection in one pass, without checkpointing"""

    def __init__(self, engine: PaginationEngine, emit: Emit):
        self.engine = engine
        self.emit = emit
        self.logger = logging.getLogger(__name__)

    def run(self, descriptor: EndpointDescriptor,
            query_params: Sequence[Tuple[str, str]] = ()) -> SyncSummary:
        """
        Fetch every page of the descriptor's collection

        Raises:
            ConfigurationError: If the descriptor is list-driven
        """
        if descriptor.mode is not SyncMode.DIRECT:
            raise ConfigurationError(f"Endpoint {descriptor.key} must be run with a list of parent keys")

        self.logger.info(f"Downloading {descriptor.entity_type} from {descriptor.path_template}")
        target = descriptor.bind(query_params)

        summary = SyncSummary(endpoint=descriptor.key)
        summary.records_emitted = self.engine.drain(target, self.emit)
        return summary


class ListDrivenSyncOrchestrator:
    """Drains a per-parent sub-resource for every key in an ordered key list"""

    def __init__(self, engine: PaginationEngine, emit: Emit):
        self.engine = engine
        self.emit = emit
        self.logger = logging.getLogger(__name__)

    def run(self, descriptor: EndpointDescriptor, parent_keys: Iterable[str],
            checkpoint: CheckpointStore,
            query_params: Sequence[Tuple[str, str]] = ()) -> SyncSummary:
        """
        Process each parent key after the checkpoint, in source order

        A key whose sub-resource does not exist (404) is logged and skipped;
        the checkpoint still advances past it. Any other error aborts the run
        with the checkpoint left on the last completed key.

        Args:
            descriptor: List-driven endpoint descriptor
            parent_keys: Ordered parent identifiers
            checkpoint: Store holding the last completed key
            query_params: Static query parameters for every request

        Returns:
            SyncSummary for the run

        Raises:
            ConfigurationError: If the descriptor is not list-driven
            PersistenceError: If progress cannot be recorded
        """
        if descriptor.mode is not SyncMode.LIST_DRIVEN:
            raise ConfigurationError(f"Endpoint {descriptor.key} does not take a list of parent keys")

        checkpoint.ensure_exists()
        summary = SyncSummary(endpoint=descriptor.key)

        for key in parent_keys:
            if not checkpoint.reached(key):
                summary.keys_skipped += 1
                continue

            self.logger.info(f"Downloading {descriptor.entity_type} for {key}")

            # Each key starts its own cursor sequence
            target = descriptor.bind(query_params, parent_key=key)
            try:
                summary.records_emitted += self.engine.drain(target, self.emit)
                summary.keys_processed += 1
            except NotFoundError as e:
                self.logger.warning(f"Skipping {key}: {e}")
                summary.keys_missing += 1

            checkpoint.persist(key)

        if not checkpoint.has_reached:
            self.logger.warning(
                f"Checkpoint {checkpoint.last_key} was not found in the key list, no keys were processed"
            )

        return summary


def run_endpoint(config: ExtractConfig, services: SyncServices) -> SyncSummary:
    """
    Run the configured endpoint with the orchestrator its descriptor selects

    Args:
        config: Run configuration
        services: Shared collaborators

    Returns:
        SyncSummary for the run

    Raises:
        ConfigurationError: If the endpoint is unknown or a list-driven endpoint
            has no key source
    """
    descriptor = get_endpoint(config.endpoint)
    query_params = config.query_parameters()

    if descriptor.mode is SyncMode.DIRECT:
        orchestrator = DirectSyncOrchestrator(services.engine, services.sink.emit)
        return orchestrator.run(descriptor, query_params)

    if config.input_path is None:
        raise ConfigurationError(
            f"To download {descriptor.entity_type} we need a csv file with a list of candidate ids, use --input="
        )

    parent_keys: List[str] = load_parent_keys(config.input_path)

    checkpoint = CheckpointStore(descriptor.entity_type, config.checkpoint_dir)
    if config.reset_checkpoint:
        checkpoint.clear()

    orchestrator = ListDrivenSyncOrchestrator(services.engine, services.sink.emit)
    return orchestrator.run(descriptor, parent_keys, checkpoint, query_params)
