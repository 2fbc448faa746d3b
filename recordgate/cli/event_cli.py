"""
Command-line interface for event processing and payload validation.

Usage:
    recordgate process --event <event.json> [options]
    recordgate validate --payload <payload.json> --schema <schema.yml> [--entity <name>]
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from recordgate.core.errors import RecordGateError
from recordgate.core.models import DEFAULT_OPERATIONS, EventConfig, RecordResult
from recordgate.core.rules import Validator
from recordgate.core.schema import SchemaStore
from recordgate.events import EventPipeline
from recordgate.observability.logger import setup_logger
from recordgate.observability.metrics import write_metrics


def load_document(path: str) -> Any:
    """Load a JSON or YAML file."""
    with open(path, "r") as f:
        return yaml.safe_load(f)


def record_to_dict(result: RecordResult) -> dict[str, Any]:
    """Summarize a pipeline result for output."""
    record = result.record
    return {
        "id": record.id,
        "source": record.source,
        "operation": result.operation,
        "valid": result.valid,
        "errors": [error.model_dump() for error in result.errors],
        "body": result.body,
    }


def build_config(args) -> EventConfig:
    """Translate process arguments into an EventConfig."""
    required_body: Any = args.entity
    if args.inline_schema:
        required_body = load_document(args.inline_schema)

    return EventConfig.from_options(
        operations=args.operations,
        validation_error=not args.no_validation_error,
        operation_error=args.operation_error,
        strict_validation=args.strict,
        required_body=required_body,
        schema_path=args.schema,
        get_object=args.get_object,
        is_json=args.content == "json",
        is_csv=args.content == "csv",
    )


def flush_metrics(args, logger: logging.Logger) -> None:
    if args.metrics_file:
        write_metrics(args.metrics_file)
        logger.debug("Metrics written", extra={"path": args.metrics_file})


def process_command(args, logger: logging.Logger) -> int:
    """
    Run an event file through the full pipeline and print the kept records.

    Args:
        args: Command-line arguments
        logger: Logger passed to the pipeline

    Returns:
        Exit code (1 when the event cannot be processed; records dropped as
        invalid are reported in the log, not in the exit code)
    """
    event_path = Path(args.event)
    if not event_path.exists():
        logger.error(f"Event file not found: {args.event}")
        return 1

    try:
        config = build_config(args)
        event = load_document(str(event_path))
        invalid: list[RecordResult] = []
        pipeline = EventPipeline(
            event,
            config,
            before=lambda checked: invalid.extend(result for result in checked if not result.valid),
            logger=logger,
        )
        results = asyncio.run(pipeline.process())
    except RecordGateError as e:
        logger.error(f"Event processing failed: {e}")
        flush_metrics(args, logger)
        print(json.dumps({"error": str(e), "details": e.details}, indent=2, default=str))
        return 1

    logger.info(
        "Event processed",
        extra={
            "raw_records": len(pipeline.raw_records),
            "kept_records": len(results),
            "invalid_records": len(invalid),
        }
    )
    print(json.dumps([record_to_dict(result) for result in results], indent=2, default=str))
    flush_metrics(args, logger)
    return 0


def validate_command(args, logger: logging.Logger) -> int:
    """
    Validate a payload file against a schema file and print error entries.

    Args:
        args: Command-line arguments
        logger: Logger passed to the schema store

    Returns:
        Exit code (1 when the payload has errors)
    """
    for path in (args.payload, args.schema):
        if not Path(path).exists():
            logger.error(f"File not found: {path}")
            return 1

    payload = load_document(args.payload)

    try:
        if args.entity:
            store = SchemaStore.from_file_path(args.schema, strict_validation=args.strict, logger=logger)
        else:
            store = SchemaStore.from_inline_schema(
                load_document(args.schema), strict_validation=args.strict, logger=logger
            )
        errors = Validator(store, validation_error=False, logger=logger).record_errors(args.entity or "", payload)
    except RecordGateError as e:
        logger.error(f"Schema resolution failed: {e}")
        return 1

    entries = [{"key": error["path"], "message": error["message"]} for error in errors]
    print(json.dumps(entries, indent=2))
    return 1 if entries else 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Normalize and validate cloud event records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Keep only creates from a stream event
  recordgate process --event events/stream.json --operations create

  # Validate queue bodies against an OpenAPI component
  recordgate process --event events/queue.json --schema openapi.yml \\
      --entity v1-item --no-validation-error

  # Fetch and validate JSON objects behind S3 notifications
  recordgate process --event events/s3.json --get-object --content json \\
      --inline-schema schemas/item.json

  # Validate a single payload
  recordgate validate --payload item.json --schema openapi.yml --entity v1-item
        """
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: LOG_LEVEL env or INFO)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Process command
    process_parser = subparsers.add_parser("process", help="Process an event file")
    process_parser.add_argument(
        "--event",
        required=True,
        help="Path to event JSON file with a Records list"
    )
    process_parser.add_argument(
        "--operations",
        nargs="+",
        default=list(DEFAULT_OPERATIONS),
        choices=["create", "update", "delete", "unknown"],
        help="Allowed operations (default: create update delete)"
    )
    process_parser.add_argument(
        "--schema",
        default=None,
        help="OpenAPI or JSON Schema document"
    )
    process_parser.add_argument(
        "--entity",
        default=None,
        help="components.schemas entry used to validate record bodies (needs --schema)"
    )
    process_parser.add_argument(
        "--inline-schema",
        default=None,
        help="JSON Schema file used directly to validate record bodies"
    )
    process_parser.add_argument(
        "--get-object",
        action="store_true",
        help="Fetch S3 object content before validation"
    )
    process_parser.add_argument(
        "--content",
        default="raw",
        choices=["raw", "json", "csv"],
        help="Decoding for fetched objects (default: raw)"
    )
    process_parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject unknown properties and enforce formats"
    )
    process_parser.add_argument(
        "--no-validation-error",
        action="store_true",
        help="Drop invalid records instead of failing"
    )
    process_parser.add_argument(
        "--operation-error",
        action="store_true",
        help="Fail on a disallowed operation instead of dropping it"
    )
    process_parser.add_argument(
        "--metrics-file",
        default=None,
        help="Write Prometheus metrics to this file after the run"
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a payload file")
    validate_parser.add_argument(
        "--payload",
        required=True,
        help="Path to JSON or YAML payload"
    )
    validate_parser.add_argument(
        "--schema",
        required=True,
        help="OpenAPI document (with --entity) or bare JSON Schema"
    )
    validate_parser.add_argument(
        "--entity",
        default=None,
        help="components.schemas entry to validate against"
    )
    validate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject unknown properties and enforce formats"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logger = setup_logger("recordgate", level=args.log_level)

    if args.command == "process":
        return process_command(args, logger)
    if args.command == "validate":
        return validate_command(args, logger)
    return 1


if __name__ == "__main__":
    sys.exit(main())
