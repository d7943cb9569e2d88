"""
Command Line Interface for the Items Service.

Provides CLI commands for running the API server, preparing a local table,
previewing update plans and working with items directly.
"""

import json
import sys
from decimal import Decimal
from typing import Any

import structlog

from items_service.config import get_settings
from items_service.errors import ItemsServiceError
from items_service.logging_config import configure_logging

logger = structlog.get_logger(__name__)


def run_server(host: str | None = None, port: int | None = None, reload: bool = False):
    """Run the API server."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "items_service.api:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


def json_default(value: Any) -> Any:
    """JSON fallback keeping DynamoDB numbers numeric."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return str(value)


def parse_fields(raw: str) -> dict[str, Any]:
    """Parse a JSON object given on the command line."""
    try:
        fields = json.loads(raw, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    if not isinstance(fields, dict):
        raise ValueError("Fields must be a JSON object")
    return fields


def show_plan(item_id: str, raw_fields: str, escape_reserved: bool = False) -> dict[str, Any]:
    """Print the update_item arguments a PATCH would send, without sending them."""
    from items_service.update_builder import PartialUpdateBuilder

    settings = get_settings()
    plan = PartialUpdateBuilder().build(item_id, parse_fields(raw_fields))
    kwargs = plan.to_update_kwargs(
        settings.dynamodb.primary_key,
        escape_reserved=escape_reserved or settings.dynamodb.escape_reserved_words,
    )
    kwargs["TableName"] = settings.dynamodb.table_name

    print(json.dumps(kwargs, indent=2, default=json_default))
    if plan.reserved_fields:
        print(f"\nReserved words: {', '.join(plan.reserved_fields)}", file=sys.stderr)
    return kwargs


def setup_table():
    """Create the items table if it is missing."""
    from items_service.services.dynamodb import create_table_if_not_exists

    logger.info("Setting up infrastructure...")
    created = create_table_if_not_exists(get_settings())
    if created:
        logger.info("DynamoDB table created")
    else:
        logger.info("DynamoDB table already exists")


def run_item_command(args) -> Any:
    """Execute one of the item CRUD commands."""
    from items_service.services.dynamodb import ItemTableService

    service = ItemTableService.from_settings(get_settings())

    if args.command == "list":
        return service.list_items()
    if args.command == "get":
        return service.get_item(args.item_id)
    if args.command == "create":
        return service.create_item(parse_fields(args.fields))
    if args.command == "update":
        return service.update_item(args.item_id, parse_fields(args.fields))
    if args.command == "delete":
        service.delete_item(args.item_id)
        return {"status": "deleted", "item_id": args.item_id}
    raise ValueError(f"Unknown command: {args.command}")


def build_parser():
    """Build the argument parser."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Items Service CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("server", help="Run the API server")
    server_parser.add_argument("--host", default=None, help="Host to bind to")
    server_parser.add_argument("--port", type=int, default=None, help="Port to bind to")
    server_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    # Setup command
    subparsers.add_parser("setup", help="Create the DynamoDB table if missing")

    # Plan command
    plan_parser = subparsers.add_parser("plan", help="Show the update a PATCH would send")
    plan_parser.add_argument("item_id", help="Item id")
    plan_parser.add_argument("fields", help="JSON object of fields to change")
    plan_parser.add_argument(
        "--escape-reserved",
        action="store_true",
        help="Alias reserved field names",
    )

    # Item commands
    subparsers.add_parser("list", help="List all items")

    get_parser = subparsers.add_parser("get", help="Get an item")
    get_parser.add_argument("item_id", help="Item id")

    create_parser = subparsers.add_parser("create", help="Create an item")
    create_parser.add_argument("fields", help="JSON object of item attributes")

    update_parser = subparsers.add_parser("update", help="Partially update an item")
    update_parser.add_argument("item_id", help="Item id")
    update_parser.add_argument("fields", help="JSON object of fields to change")

    delete_parser = subparsers.add_parser("delete", help="Delete an item")
    delete_parser.add_argument("item_id", help="Item id")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    try:
        if args.command == "server":
            run_server(args.host, args.port, args.reload)

        elif args.command == "setup":
            setup_table()

        elif args.command == "plan":
            show_plan(args.item_id, args.fields, args.escape_reserved)

        elif args.command in ("list", "get", "create", "update", "delete"):
            result = run_item_command(args)
            print(json.dumps(result, indent=2, default=json_default))

        else:
            parser.print_help()

    except (ItemsServiceError, ValueError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
