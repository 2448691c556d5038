"""
Delayed message deletion for short-lived bot replies (warnings, command
acknowledgements).

Pending deletions live only in memory: anything still queued when the
process exits is dropped, which leaves a stray bot message behind and
nothing worse.
"""
import asyncio
import heapq
from dataclasses import dataclass
from typing import Any, Dict

import discord

from chatwarden.util.logger import get_logger

logger = get_logger("deletion_scheduler")


@dataclass
class PendingDeletion:
    """
    A message waiting to be deleted.

    Attributes:
        message (Any): Object exposing an awaitable ``delete()``, normally a
            :class:`discord.Message`.
        key (int): Identifier used for cancellation (the message id).
    """
    message: Any
    key: int


def deletion_key(message: Any) -> int:
    message_id = getattr(message, "id", None)
    return message_id if isinstance(message_id, int) else id(message)


class DeletionScheduler:
    """
    Min-heap scheduler that deletes messages once their delay has elapsed.

    Attributes:
        heap (list): Min-heap of (run_at, job_id, payload) tuples.
        pending_keys (Dict): Maps message keys to their live job id.
        cancelled_ids (set): Job ids that must be skipped when popped.
        counter (int): Monotonically increasing job id.
        runner_task (asyncio.Task | None): Background task draining the heap.
        condition (asyncio.Condition): Wakes the runner when the heap changes.
        schedule_tasks (set): In-flight tasks created by :meth:`schedule_nowait`.
    """

    def __init__(self) -> None:
        self.heap: list[tuple[float, int, PendingDeletion]] = []
        self.pending_keys: Dict[int, int] = {}
        self.cancelled_ids: set[int] = set()
        self.counter: int = 0
        self.runner_task: asyncio.Task[None] | None = None
        self.condition: asyncio.Condition = asyncio.Condition()
        self.schedule_tasks: set[asyncio.Task[None]] = set()

    def ensure_runner(self) -> None:
        """Start the background runner unless one is already alive."""
        loop = asyncio.get_running_loop()
        if self.runner_task is None or self.runner_task.done():
            self.runner_task = loop.create_task(self.run(), name="chatwarden-deletion-scheduler")

    async def schedule(self, message: Any, delay_seconds: float) -> None:
        """
        Queue ``message`` for deletion after ``delay_seconds``.

        A non-positive delay deletes immediately. Scheduling a message that is
        already queued replaces the earlier entry.
        """
        if message is None:
            return

        payload = PendingDeletion(message=message, key=deletion_key(message))

        if delay_seconds <= 0:
            await self.execute(payload)
            return

        loop = asyncio.get_running_loop()
        run_at = loop.time() + delay_seconds

        async with self.condition:
            self.ensure_runner()
            if payload.key in self.pending_keys:
                self.cancelled_ids.add(self.pending_keys[payload.key])

            self.counter += 1
            job_id = self.counter
            heapq.heappush(self.heap, (run_at, job_id, payload))
            self.pending_keys[payload.key] = job_id
            self.condition.notify_all()

    def schedule_nowait(self, message: Any, delay_seconds: float) -> None:
        """Fire-and-forget variant of :meth:`schedule` for synchronous callers."""
        task = asyncio.get_running_loop().create_task(self.schedule(message, delay_seconds))
        self.schedule_tasks.add(task)
        task.add_done_callback(self._schedule_task_done)

    def _schedule_task_done(self, task: asyncio.Task) -> None:
        self.schedule_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("[DELETION SCHEDULER] Failed to schedule deletion: %s", exc)

    async def cancel(self, message_id: int) -> bool:
        """Cancel a pending deletion; return False if none was queued."""
        async with self.condition:
            job_id = self.pending_keys.pop(message_id, None)
            if job_id is None:
                return False

            self.cancelled_ids.add(job_id)
            self.condition.notify_all()
            return True

    async def shutdown(self) -> None:
        """Stop the runner and forget every pending deletion. Safe to call twice."""
        async with self.condition:
            if self.runner_task:
                self.runner_task.cancel()
            self.heap.clear()
            self.pending_keys.clear()
            self.cancelled_ids.clear()
            self.condition.notify_all()

        if self.runner_task:
            try:
                await self.runner_task
            except asyncio.CancelledError:
                pass
            finally:
                self.runner_task = None

    async def run(self) -> None:
        """Background loop deleting messages as their timers elapse."""
        loop = asyncio.get_running_loop()
        while True:
            async with self.condition:
                while self.heap and self.heap[0][1] in self.cancelled_ids:
                    _, job_id, _ = heapq.heappop(self.heap)
                    self.cancelled_ids.discard(job_id)

                if not self.heap:
                    await self.condition.wait()
                    continue

                run_at, _, _ = self.heap[0]
                delay = run_at - loop.time()

                if delay > 0:
                    try:
                        await asyncio.wait_for(self.condition.wait(), timeout=delay)
                    except asyncio.TimeoutError:
                        pass
                    continue

                _, job_id, payload = heapq.heappop(self.heap)
                if self.pending_keys.get(payload.key) == job_id:
                    del self.pending_keys[payload.key]

            await self.execute(payload)

    async def execute(self, payload: PendingDeletion) -> None:
        """Delete the message, logging (never raising) on failure."""
        try:
            await payload.message.delete()
            logger.debug("[DELETION SCHEDULER] Deleted message %s", payload.key)
        except discord.NotFound:
            logger.debug("[DELETION SCHEDULER] Message %s was already gone", payload.key)
        except discord.Forbidden:
            logger.warning("[DELETION SCHEDULER] No permission to delete message %s", payload.key)
        except Exception as exc:
            logger.error("[DELETION SCHEDULER] Failed to delete message %s: %s", payload.key, exc)
