"""Composition root for the articlesync import/export adapter.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Interactive command loop
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from articlesync.adapters.cli.commands import CLICommandHandler
from articlesync.adapters.queue.memory import InMemoryDeferredWorkQueue
from articlesync.adapters.store.sqlite import SQLiteArticleStore
from articlesync.config import Settings, load_settings
from articlesync.core.articles_service import ArticlesService
from articlesync.core.normalizer import RecordNormalizer


async def _run_cli_interactive(cli_handler: CLICommandHandler) -> None:
    """Run interactive CLI loop.

    Provides a REPL-like interface for import and export commands.

    Args:
        cli_handler: CLICommandHandler instance for executing commands.
    """
    logger = logging.getLogger(__name__)
    logger.info("Starting interactive CLI. Type 'help' for available commands or 'exit' to quit.")

    loop = asyncio.get_running_loop()

    while True:
        try:
            # Read command from stdin in a thread to avoid blocking
            command_line = await loop.run_in_executor(None, input, "articlesync> ")
            command_line = command_line.strip()

            if not command_line:
                continue

            if command_line.lower() == "exit":
                logger.info("Exiting CLI")
                break

            if command_line.lower() == "help":
                _print_cli_help()
                continue

            parts = command_line.split(maxsplit=1)
            command = parts[0].lower()
            args_str = parts[1] if len(parts) > 1 else ""

            try:
                args = json.loads(args_str) if args_str else {}
            except json.JSONDecodeError:
                logger.error("Invalid JSON arguments. Use 'help' for command syntax.")
                continue

            try:
                result = await _execute_cli_command(cli_handler, command, args)
                print(json.dumps(result, indent=2, default=str))
            except Exception as e:
                logger.error(f"Command execution error: {e}", exc_info=True)
                print(json.dumps({"status": "error", "message": str(e)}, indent=2))

        except EOFError:
            logger.info("EOF received, exiting CLI")
            break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            continue


async def _execute_cli_command(
    cli_handler: CLICommandHandler,
    command: str,
    args: dict[str, Any],
) -> dict[str, Any]:
    """Execute a CLI command.

    Args:
        cli_handler: CLICommandHandler instance.
        command: Command name.
        args: Command arguments.

    Returns:
        Command result dictionary.

    Raises:
        ValueError: If command is not recognized or arguments are missing.
    """
    if command == "import":
        if "file" in args:
            records = json.loads(Path(args["file"]).read_text(encoding="utf-8"))
        elif "records" in args:
            records = args["records"]
        else:
            raise ValueError("Missing required parameter: records or file")
        return await cli_handler.import_records(records, verbose=args.get("verbose", False))

    elif command == "export":
        if "ids" not in args:
            raise ValueError("Missing required parameter: ids")
        return await cli_handler.export_records(
            ids=args["ids"],
            columns=args.get("columns"),
            output_format=args.get("format", "json"),
        )

    elif command == "ids":
        return await cli_handler.list_ids(
            start=args.get("start", 0),
            limit=args.get("limit"),
            category_id=args.get("category_id"),
        )

    elif command == "unprocessed":
        return cli_handler.unprocessed()

    elif command == "drain":
        return cli_handler.drain(bucket=args.get("bucket"))

    else:
        raise ValueError(f"Unknown command: {command}. Use 'help' for available commands.")


def _print_cli_help() -> None:
    """Print CLI help message."""
    help_text = """
Available Commands (JSON format):

  import
    Import a batch of article records.
    Required: records (inline) or file (path to a JSON file)

    Example: import {"records": {"article": [{"orderNumber": "SW-1", "name": "Shirt",
             "taxId": 1, "supplierName": "Acme"}]}}

  export
    Export articles by id. Columns default to all exportable columns.
    Required: ids
    Optional: columns, format (json, text)

    Example: export {"ids": [1, 2], "columns": {"article": ["article.id as articleId"]}}

  ids
    List exportable article ids.
    Optional: start, limit, category_id

    Example: ids {"start": 0, "limit": 50}

  unprocessed
    Show deferred records (e.g. images waiting for download).

  drain
    Remove deferred records and print them for processing.
    Optional: bucket

    Example: drain {"bucket": "articlesImages"}

  help
    Show this help message.

  exit
    Exit the CLI.

Note: All commands accept arguments as a single JSON object.
Provide the JSON after the command name on the same line.
    """
    print(help_text)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_service(
    settings: Settings,
) -> tuple[ArticlesService, SQLiteArticleStore, InMemoryDeferredWorkQueue]:
    """Instantiate adapters and wire them into the articles service."""
    store = SQLiteArticleStore(
        db_path=settings.store_sqlite_path,
        pool_size=settings.store_pool_size,
    )
    queue = InMemoryDeferredWorkQueue()
    service = ArticlesService(
        store=store,
        media_store=store,
        deferred_work=queue,
        normalizer=RecordNormalizer(default_customer_group=settings.default_customer_group),
        skip_invalid_articles=settings.skip_invalid_articles,
        image_bucket=settings.image_bucket,
    )
    return service, store, queue


async def bootstrap() -> None:
    """Load configuration, wire adapters, and start the command loop.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate adapters and core service
    4. Run the interactive CLI
    """
    settings = load_settings()

    configure_logging("DEBUG" if settings.debug else settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info("Loading articlesync...")

    service, store, queue = build_service(settings)
    logger.info(f"Article store initialized: {settings.store_sqlite_path}")

    try:
        cli_handler = CLICommandHandler(service, service, queue)
        await _run_cli_interactive(cli_handler)
    finally:
        await store.close_pool()
        if len(queue):
            logger.warning(
                f"{len(queue)} deferred tasks were not drained",
                extra={"pending": len(queue)},
            )


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
