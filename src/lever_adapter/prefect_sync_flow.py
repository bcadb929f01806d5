"""
Prefect orchestration for Lever extraction
Wraps configuration checks, key loading and the sync run as Prefect tasks

lever-extract --endpoint downloadInterviews --input candidates.csv --prefect
"""

import logging
from dataclasses import replace
from typing import List

from prefect import flow, task, get_run_logger
from prefect.cache_policies import NO_CACHE
from prefect.exceptions import MissingContextError

from lever_adapter.config_loader import ConfigLoader, ConfigurationError, ExtractConfig
from lever_adapter.endpoint_registry import EndpointDescriptor, SyncMode, get_endpoint
from lever_adapter.checkpoint_store import CheckpointStore
from lever_adapter.key_source import load_parent_keys
from lever_adapter.sync_orchestrator import (
    SyncServices, SyncSummary, DirectSyncOrchestrator, ListDrivenSyncOrchestrator, build_services
)


def _task_logger():
    """Prefect run logger inside a run, module logger when called directly"""
    try:
        return get_run_logger()
    except MissingContextError:
        return logging.getLogger(__name__)


# ===================================================================
# PREFECT TASKS
# ===================================================================

@task(
    name="validate_endpoint_configuration",
    description="Resolve the endpoint and check its required inputs",
    retries=0
)
def validate_endpoint_configuration(config: ExtractConfig) -> EndpointDescriptor:
    """
    Resolve the configured endpoint and check list-driven inputs

    Returns:
        Descriptor of the endpoint to run

    Raises:
        ConfigurationError: If the endpoint is unknown or has no key source
    """
    logger = _task_logger()
    descriptor = get_endpoint(config.endpoint)

    if descriptor.mode is SyncMode.LIST_DRIVEN and config.input_path is None:
        raise ConfigurationError(
            f"To download {descriptor.entity_type} we need a csv file with a list of candidate ids, use --input="
        )

    logger.info(f"Validated endpoint {descriptor.key} ({descriptor.mode.value})")
    return descriptor


@task(
    name="load_parent_key_list",
    description="Load parent keys from the input csv file",
    retries=0
)
def load_parent_key_list(config: ExtractConfig) -> List[str]:
    """Load parent keys for a list-driven endpoint"""
    logger = _task_logger()
    keys = load_parent_keys(config.input_path)
    logger.info(f"Loaded {len(keys)} parent keys")
    return keys


@task(
    name="sync_direct_endpoint",
    description="Drain a top-level collection",
    retries=0,
    cache_policy=NO_CACHE
)
def sync_direct_endpoint(descriptor: EndpointDescriptor, config: ExtractConfig,
                         services: SyncServices) -> SyncSummary:
    logger = _task_logger()
    orchestrator = DirectSyncOrchestrator(services.engine, services.sink.emit)
    summary = orchestrator.run(descriptor, config.query_parameters())
    logger.info(f"Emitted {summary.records_emitted} {descriptor.entity_type} records")
    return summary


@task(
    name="sync_list_driven_endpoint",
    description="Drain a per-candidate sub-resource for every key after the checkpoint",
    retries=0,  # The checkpoint, not task retries, makes reruns safe
    cache_policy=NO_CACHE
)
def sync_list_driven_endpoint(descriptor: EndpointDescriptor, parent_keys: List[str],
                              config: ExtractConfig, services: SyncServices) -> SyncSummary:
    logger = _task_logger()
    checkpoint = CheckpointStore(descriptor.entity_type, config.checkpoint_dir)
    if config.reset_checkpoint:
        checkpoint.clear()

    orchestrator = ListDrivenSyncOrchestrator(services.engine, services.sink.emit)
    summary = orchestrator.run(descriptor, parent_keys, checkpoint, config.query_parameters())
    logger.info(
        f"Processed {summary.keys_processed} keys ({summary.keys_skipped} skipped, "
        f"{summary.keys_missing} not found), emitted {summary.records_emitted} records"
    )
    return summary


# ===================================================================
# PREFECT FLOW
# ===================================================================

@flow(
    name="lever_sync_flow",
    description="Synchronise one Lever endpoint to line-delimited JSON",
    retries=0,
    validate_parameters=False
)
def lever_sync_flow(config: ExtractConfig) -> SyncSummary:
    """
    Run one endpoint sequentially inside a Prefect flow

    Flow parameters are kept in Prefect's run history, so the API token is
    never one of them: it is read from the environment variable named by
    config.token_env when the run starts.

    Args:
        config: Run configuration without a token, see ExtractConfig.without_token

    Returns:
        SyncSummary for the run
    """
    descriptor = validate_endpoint_configuration(config)
    token = ConfigLoader.resolve_token(config.token_env)

    services = build_services(replace(config, token=token))
    try:
        if descriptor.mode is SyncMode.DIRECT:
            return sync_direct_endpoint(descriptor, config, services)

        parent_keys = load_parent_key_list(config)
        return sync_list_driven_endpoint(descriptor, parent_keys, config, services)
    finally:
        services.close()
