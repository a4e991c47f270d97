"""
Throttled API request queue.

Sandi Metz Principles:
- Single Responsibility: Pacing outbound requests
- Small methods: Enqueue, drain and execute isolated
- Configurable: Batch size and delays
"""

import asyncio
from collections import deque
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, Optional, Tuple, TypeVar

from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

RequestFn = Callable[[], Awaitable[Any]]


class RequestPriority(str, Enum):
    """Queue placement of a request."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RequestQueue:
    """
    Runs queued requests sequentially in paced batches.

    High priority requests bypass the queue, medium ones jump to the
    front and low ones wait at the back.
    """

    def __init__(
        self,
        batch_size: int = 3,
        request_delay_ms: int = 100,
        batch_delay_ms: int = 500,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize queue.

        Args:
            batch_size: Requests per batch
            request_delay_ms: Pause after each request
            batch_delay_ms: Pause between batches
            sleep: Awaitable sleep
        """
        self.batch_size = batch_size
        self.request_delay_ms = request_delay_ms
        self.batch_delay_ms = batch_delay_ms
        self._sleep = sleep
        self._queue: Deque[Tuple[RequestFn, asyncio.Future]] = deque()
        self._worker: Optional[asyncio.Task] = None
        self._stats = {"submitted": 0, "bypassed": 0, "completed": 0, "failed": 0, "batches": 0}

    async def submit(
        self,
        request_fn: Callable[[], Awaitable[T]],
        priority: RequestPriority = RequestPriority.MEDIUM,
    ) -> T:
        """
        Run a request through the queue.

        Args:
            request_fn: Zero-argument coroutine function
            priority: Queue placement

        Returns:
            The request's own result; its own exception is re-raised
        """
        priority = RequestPriority(priority)
        self._stats["submitted"] += 1

        if priority is RequestPriority.HIGH:
            self._stats["bypassed"] += 1
            return await request_fn()

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        if priority is RequestPriority.MEDIUM:
            self._queue.appendleft((request_fn, future))
        else:
            self._queue.append((request_fn, future))

        self._ensure_worker()
        return await future

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._drain())

    async def _drain(self) -> None:
        """Process queued requests until the queue is empty."""
        while self._queue:
            count = min(self.batch_size, len(self._queue))
            batch = [self._queue.popleft() for _ in range(count)]
            self._stats["batches"] += 1

            for request_fn, future in batch:
                await self._execute(request_fn, future)
                await self._sleep(self.request_delay_ms / 1000)

            if self._queue:
                await self._sleep(self.batch_delay_ms / 1000)

    async def _execute(self, request_fn: RequestFn, future: asyncio.Future) -> None:
        if future.done():
            return

        try:
            result = await request_fn()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            self._stats["failed"] += 1
            if not future.done():
                future.set_exception(e)
            return

        self._stats["completed"] += 1
        if not future.done():
            future.set_result(result)

    @property
    def pending(self) -> int:
        """Get number of queued requests."""
        return len(self._queue)

    def get_stats(self) -> Dict[str, Any]:
        """Get queue statistics."""
        return {**self._stats, "pending": self.pending}

    async def close(self) -> None:
        """Stop draining and cancel queued requests."""
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None

        while self._queue:
            _, future = self._queue.popleft()
            if not future.done():
                future.cancel()
