"""CLI command implementations for article import and export.

This adapter maps CLI commands (import, export, ids, unprocessed, drain)
to the ImportPort and ExportPort operations. It handles CLI-specific
formatting and error reporting.
"""

import json
import logging
from typing import Any

from articlesync.core.errors import ImportAdapterError, StorageError
from articlesync.core.ports import DeferredWorkPort, ExportPort, ImportPort

logger = logging.getLogger(__name__)


class CLICommandHandler:
    """Handles CLI commands by delegating to the driving ports."""

    def __init__(
        self,
        importer: ImportPort,
        exporter: ExportPort,
        deferred_work: DeferredWorkPort,
    ):
        """Initialize the CLI command handler.

        Args:
            importer: ImportPort implementation for writes.
            exporter: ExportPort implementation for reads.
            deferred_work: Queue drained by the `drain` command.
        """
        self.importer = importer
        self.exporter = exporter
        self.deferred_work = deferred_work

    async def import_records(
        self, records: dict[str, Any], verbose: bool = False
    ) -> dict[str, Any]:
        """Import a batch of article records.

        Returns:
            Dictionary with status, counts and skipped-article messages.
            Business-rule failures are reported as status "error".

        Raises:
            StorageError: If the store fails.
        """
        try:
            result = await self.importer.write(records)
        except StorageError:
            raise
        except ImportAdapterError as e:
            logger.error(f"Import failed: {e}")
            return {
                "status": "error",
                "operation": "import",
                "error_type": type(e).__name__,
                "message": str(e),
            }

        response: dict[str, Any] = {
            "status": "success",
            "operation": "import",
            "articles_created": result.articles_created,
            "articles_updated": result.articles_updated,
            "articles_skipped": result.articles_skipped,
            "suppliers_created": result.suppliers_created,
            "images_attached": result.images_attached,
            "images_deferred": result.images_deferred,
        }
        messages = self.importer.get_log_messages()
        if messages:
            response["messages"] = messages

        if verbose:
            logger.info("Imported article batch", extra={"verbose": True, **response})

        return response

    async def export_records(
        self,
        ids: list[int],
        columns: dict[str, Any] | None = None,
        output_format: str = "json",
    ) -> dict[str, Any]:
        """Export record graphs for article ids.

        Args:
            ids: Article ids to export.
            columns: Requested columns per section. Defaults to all columns.
            output_format: "json" or "text".
        """
        try:
            data = await self.exporter.read(
                ids, columns or self.exporter.get_default_columns()
            )
        except StorageError:
            raise
        except ImportAdapterError as e:
            logger.error(f"Export failed: {e}")
            return {
                "status": "error",
                "operation": "export",
                "error_type": type(e).__name__,
                "message": str(e),
            }

        if output_format == "text":
            return {
                "status": "success",
                "operation": "export",
                "data": _format_export_text(data),
            }
        return {"status": "success", "operation": "export", "data": data}

    async def list_ids(
        self,
        start: int = 0,
        limit: int | None = None,
        category_id: int | None = None,
    ) -> dict[str, Any]:
        """List article ids available for export."""
        try:
            ids = await self.exporter.read_record_ids(start, limit, category_id)
        except StorageError:
            raise
        except ImportAdapterError as e:
            return {"status": "error", "operation": "ids", "message": str(e)}
        return {"status": "success", "operation": "ids", "ids": ids, "count": len(ids)}

    def unprocessed(self) -> dict[str, Any]:
        """Show records waiting in the deferred work queue."""
        return {
            "status": "success",
            "operation": "unprocessed",
            "data": self.importer.get_unprocessed_data(),
        }

    def drain(self, bucket: str | None = None) -> dict[str, Any]:
        """Remove deferred records so an external consumer can process them."""
        tasks = self.deferred_work.drain(bucket)
        return {
            "status": "success",
            "operation": "drain",
            "count": len(tasks),
            "tasks": [
                {
                    "bucket": task.bucket,
                    "sub_bucket": task.sub_bucket,
                    "payload": dict(task.payload),
                }
                for task in tasks
            ],
        }


def _format_export_text(data: dict[str, list[dict[str, Any]]]) -> str:
    lines: list[str] = []
    for section, rows in data.items():
        lines.append(f"[{section}] {len(rows)} rows")
        for row in rows:
            lines.append("  " + json.dumps(row, default=str, sort_keys=True))
    return "\n".join(lines)
