# questclient/cli.py
"""
Command-line entry point for the work item client.

Credentials and scope come from the environment (see Settings):

    AZURE_DEVOPS_TOKEN=... AZURE_DEVOPS_ORG=my-org AZURE_DEVOPS_PROJECT=my-project \
        questclient get 42

    questclient create story.json
    echo '[{"op": "add", "path": "/fields/System.State", "value": "Active"}]' \
        | questclient patch 42 -

Version: 1.0.0
"""
import argparse
import asyncio
import json
import sys
from typing import Any, List, Optional

import aiohttp
import structlog
from pydantic import ValidationError

from questclient.models.json_patch import PatchOperation, parse_patch_document
from questclient.services.work_items import WorkItemClient, WorkItemError
from questclient.utils.config import Settings, __version__, get_settings
from questclient.utils.constants import DEFAULT_WORK_ITEM_TYPE, JSON_INDENT
from questclient.utils.logging import clear_logging_context, get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="questclient",
        description="Create, read and update Azure DevOps work items.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    get_cmd = commands.add_parser("get", help="Fetch a work item")
    get_cmd.add_argument("work_item_id", type=int)

    create_cmd = commands.add_parser("create", help="Create a work item")
    create_cmd.add_argument("document", help="JSON Patch file, or - for stdin")
    create_cmd.add_argument(
        "--type",
        dest="work_item_type",
        default=DEFAULT_WORK_ITEM_TYPE,
        help=f"Work item type (default: {DEFAULT_WORK_ITEM_TYPE})",
    )

    patch_cmd = commands.add_parser("patch", help="Update a work item")
    patch_cmd.add_argument("work_item_id", type=int)
    patch_cmd.add_argument("document", help="JSON Patch file, or - for stdin")

    return parser


def read_document(source: str) -> List[PatchOperation]:
    """Load a JSON Patch document from a file path or stdin ("-")."""
    if source == "-":
        return parse_patch_document(sys.stdin.read())
    with open(source, encoding="utf-8") as handle:
        return parse_patch_document(handle.read())


async def run_command(args: argparse.Namespace, settings: Settings) -> Any:
    """Execute one parsed command against Azure DevOps."""
    operations = read_document(args.document) if args.command != "get" else None

    async with WorkItemClient.from_settings(settings) as client:
        if args.command == "get":
            return await client.get_work_item(args.work_item_id)
        if args.command == "create":
            return await client.create_work_item(operations, args.work_item_type)
        if args.command == "patch":
            return await client.patch_work_item(args.work_item_id, operations)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI.

    Returns:
        Process exit code (0 on success, 1 on failure)
    """
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging(args.log_level or "INFO")
        logger.error("configuration_invalid", error=str(e))
        return 1

    setup_logging(args.log_level or settings.LOG_LEVEL)
    clear_logging_context()
    structlog.contextvars.bind_contextvars(command=args.command)

    try:
        result = asyncio.run(run_command(args, settings))
    except (WorkItemError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error("command_failed", error=str(e), error_type=type(e).__name__)
        return 1
    except (OSError, ValueError, TypeError) as e:
        logger.error("invalid_input", error=str(e), error_type=type(e).__name__)
        return 1

    print(json.dumps(result, indent=JSON_INDENT))
    return 0


if __name__ == "__main__":
    sys.exit(main())
