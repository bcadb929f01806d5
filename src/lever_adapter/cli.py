"""
Command-line entry point for Lever extraction

lever-extract --endpoint downloadInterviews --input candidates.csv --token $LEVER_API_TOKEN > interviews.jsonl
"""

import sys
import logging
import argparse
import traceback
from pathlib import Path
from typing import List, Optional

from lever_adapter.config_loader import ConfigLoader, ConfigurationError
from lever_adapter.endpoint_registry import ENDPOINTS
from lever_adapter.sync_orchestrator import build_services, run_endpoint


logger = logging.getLogger("lever_extract")


def configure_logging(debug: bool = False) -> None:
    """Log to stderr so stdout carries only records"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


def build_parser() -> argparse.ArgumentParser:
    endpoint_help = "\n".join(
        f"  {key:<26}{descriptor.description}" for key, descriptor in ENDPOINTS.items()
    )
    parser = argparse.ArgumentParser(
        prog="lever-extract",
        description="Download Lever collections as line-delimited JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Endpoints:
{endpoint_help}

Examples:
  # Download all postings
  lever-extract --endpoint downloadPostings > postings.jsonl

  # Download interviews for every candidate in a csv file, resuming after the last completed candidate
  lever-extract --endpoint downloadInterviews --input candidates.csv >> interviews.jsonl
        """
    )

    parser.add_argument("--token", help="Lever api token (defaults to $LEVER_API_TOKEN)")
    parser.add_argument("--endpoint", help="Lever endpoint to hit")
    parser.add_argument("--input", help="CSV file whose first column lists candidate ids")
    parser.add_argument("--created-at-start", help="Set created_at_start query parameter")
    parser.add_argument("--archived-at-start", help="Set archived_at_start query parameter")
    parser.add_argument("--perform-as", help="Set perform_as query parameter")
    parser.add_argument("--config", help="Path to TOML configuration file")
    parser.add_argument("--output", help="Append records to this file instead of stdout")
    parser.add_argument("--checkpoint-dir", help="Directory holding checkpoint files")
    parser.add_argument("--reset-checkpoint", action="store_true", help="Start list-driven endpoints from the first key")
    parser.add_argument("--cache", action="store_true", help="Enable development caching")
    parser.add_argument("--prefect", action="store_true", help="Run the sync as a Prefect flow")
    parser.add_argument("--list-endpoints", action="store_true", help="List registered endpoints and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the configured endpoint and return the exit status"""
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv

    if not argv:
        parser.print_help(sys.stderr)
        return 1

    args = parser.parse_args(argv)
    configure_logging(args.debug)

    if args.list_endpoints:
        for key, descriptor in ENDPOINTS.items():
            print(f"{key}\t{descriptor.mode.value}\t{descriptor.description}")
        return 0

    try:
        file_config = ConfigLoader.load_toml_config(Path(args.config)) if args.config else None
        config = ConfigLoader.build_config(args, file_config)

        if args.prefect:
            # Flow parameters are stored in Prefect's run history
            if args.token:
                raise ConfigurationError(
                    f"--token cannot be used with --prefect, export {config.token_env} instead"
                )
            from lever_adapter.prefect_sync_flow import lever_sync_flow
            summary = lever_sync_flow(config.without_token())
        else:
            services = build_services(config)
            try:
                summary = run_endpoint(config, services)
            finally:
                services.close()

        logger.info(
            f"All done: {summary.records_emitted} records, {summary.keys_processed} keys processed, "
            f"{summary.keys_skipped} skipped, {summary.keys_missing} not found"
        )
        return 0

    except Exception as e:
        logger.error(f"Execution failed: {e}")
        if args.debug:
            logger.debug(f"Traceback: {traceback.format_exc()}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
