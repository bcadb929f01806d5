"""
Lever API extraction package
Provides resumable, rate-limited pagination of Lever collections to line-delimited JSON
"""

from .config_loader import ConfigLoader, ConfigurationError, ExtractConfig, CacheConfig
from .endpoint_registry import EndpointDescriptor, SyncMode, SyncTarget, PageCursor, ENDPOINTS, get_endpoint
from .http_client import (
    HTTPClient, PageEnvelope, TransportError, NotFoundError, UnexpectedStatusError, DecodeError
)
from .rate_limiter import RateLimiter
from .record_schemas import LeverRecord, RecordDecoderRegistry
from .pagination_engine import PaginationEngine
from .checkpoint_store import CheckpointStore, PersistenceError
from .key_source import load_parent_keys
from .output_sink import JsonLinesSink
from .sync_orchestrator import (
    SyncServices, SyncSummary, DirectSyncOrchestrator, ListDrivenSyncOrchestrator, run_endpoint,
    build_session, build_services
)

__all__ = [
    'ConfigLoader',
    'ConfigurationError',
    'ExtractConfig',
    'CacheConfig',
    'EndpointDescriptor',
    'SyncMode',
    'SyncTarget',
    'PageCursor',
    'ENDPOINTS',
    'get_endpoint',
    'HTTPClient',
    'PageEnvelope',
    'TransportError',
    'NotFoundError',
    'UnexpectedStatusError',
    'DecodeError',
    'RateLimiter',
    'LeverRecord',
    'RecordDecoderRegistry',
    'PaginationEngine',
    'CheckpointStore',
    'PersistenceError',
    'load_parent_keys',
    'JsonLinesSink',
    'SyncServices',
    'SyncSummary',
    'DirectSyncOrchestrator',
    'ListDrivenSyncOrchestrator',
    'run_endpoint',
    'build_session',
    'build_services'
]
