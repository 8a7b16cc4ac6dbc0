"""In-process deferred work queue.

Implements DeferredWorkPort with plain lists. Contents live as long as
the queue instance; a consumer drains them explicitly.
"""

import logging
from typing import Any

from articlesync.core.models import DeferredTask
from articlesync.core.ports import DeferredWorkPort

logger = logging.getLogger(__name__)


class InMemoryDeferredWorkQueue(DeferredWorkPort):
    """Ordered in-memory queue of deferred tasks."""

    def __init__(self):
        self._tasks: list[DeferredTask] = []

    def enqueue(
        self, bucket: str, record: dict[str, Any], sub_bucket: str = "default"
    ) -> DeferredTask:
        """Append a record to a bucket."""
        if not bucket:
            raise ValueError("bucket must be a non-empty string")
        task = DeferredTask(bucket=bucket, sub_bucket=sub_bucket, payload=dict(record))
        self._tasks.append(task)
        logger.debug(
            f"Deferred task queued in {bucket}/{sub_bucket}",
            extra={"bucket": bucket, "sub_bucket": sub_bucket, "queued": len(self._tasks)},
        )
        return task

    def drain(self, bucket: str | None = None) -> list[DeferredTask]:
        """Remove and return queued tasks in enqueue order."""
        if bucket is None:
            drained, self._tasks = self._tasks, []
        else:
            drained = [task for task in self._tasks if task.bucket == bucket]
            self._tasks = [task for task in self._tasks if task.bucket != bucket]

        if drained:
            logger.info(
                f"Drained {len(drained)} deferred tasks",
                extra={"bucket": bucket, "drained": len(drained)},
            )
        return drained

    def snapshot(self) -> dict[str, dict[str, list[dict[str, Any]]]]:
        result: dict[str, dict[str, list[dict[str, Any]]]] = {}
        for task in self._tasks:
            result.setdefault(task.bucket, {}).setdefault(task.sub_bucket, []).append(
                dict(task.payload)
            )
        return result

    def __len__(self) -> int:
        return len(self._tasks)
