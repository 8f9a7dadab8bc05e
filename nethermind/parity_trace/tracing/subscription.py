import asyncio
import logging
import uuid
from typing import AsyncIterator

from nethermind.parity_trace.types.trace import BlockTraceNotification

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("parity_trace").getChild("subscription")


class _StreamEnd:
    """Marks the end of a trace stream"""


class _StreamFailure:
    """Carries a producer error to the consumer"""

    def __init__(self, error: BaseException):
        self.error = error


_END = _StreamEnd()


class TraceSubscription:
    """
    Handle for a streamed range trace.

    Notifications are produced by a background task reading from the chain tracer, and are consumed with
    ``async for``.  At most ``buffer_size`` notifications are queued before the producer waits for the consumer.
    Closing the subscription stops the producer, and ends iteration.

    >>> async with await dispatcher.start(filter_args, config) as subscription:
    ...     async for notification in subscription:
    ...         handle(notification)

    """

    def __init__(self, source: AsyncIterator[BlockTraceNotification], buffer_size: int = 128):
        self.id = uuid.uuid4().hex
        self.error: BaseException | None = None

        self._queue: asyncio.Queue = asyncio.Queue(maxsize=buffer_size)
        self._closed = False
        self._finished = False
        self._producer = asyncio.create_task(self._produce(source), name=f"trace-subscription-{self.id}")

    @property
    def closed(self) -> bool:
        return self._closed

    async def _produce(self, source: AsyncIterator[BlockTraceNotification]):
        try:
            async for notification in source:
                await self._queue.put(notification)
        except asyncio.CancelledError:
            logger.debug(f"Subscription {self.id} cancelled")
            raise
        except Exception as e:  # pylint: disable=broad-except
            logger.error(f"Range trace for subscription {self.id} failed: {e}")
            self.error = e
            await self._queue.put(_StreamFailure(e))
            return
        finally:
            aclose = getattr(source, "aclose", None)
            if aclose is not None:
                await aclose()

        logger.debug(f"Subscription {self.id} finished producing notifications")
        await self._queue.put(_END)

    def __aiter__(self) -> "TraceSubscription":
        return self

    async def __anext__(self) -> BlockTraceNotification:
        if self._finished:
            raise StopAsyncIteration

        item = await self._queue.get()
        if isinstance(item, _StreamEnd):
            self._finished = True
            raise StopAsyncIteration
        if isinstance(item, _StreamFailure):
            self._finished = True
            raise item.error
        return item

    async def close(self):
        """Stops the producer.  Notifications that were not yet read are discarded"""
        if self._closed:
            return
        self._closed = True

        self._producer.cancel()
        await asyncio.gather(self._producer, return_exceptions=True)

        while not self._queue.empty():
            self._queue.get_nowait()
        # Wakes a consumer waiting on the queue
        self._queue.put_nowait(_END)
        logger.debug(f"Subscription {self.id} closed")

    async def __aenter__(self) -> "TraceSubscription":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
