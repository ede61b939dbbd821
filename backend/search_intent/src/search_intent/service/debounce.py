import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from ..config import settings

logger = logging.getLogger(settings.SERVICE_NAME + ".debounce")

T = TypeVar("T")


class Debouncer(Generic[T]):
    """
    Runs a callback for the latest submitted value once input has been quiet
    for `delay` seconds. Submitting again cancels the pending run, so at most
    one computation is scheduled at a time.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[T], Union[Awaitable[Any], Any]],
    ):
        self.delay = delay
        self.callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, value: T) -> None:
        """Schedule the callback for `value`, replacing any pending run."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(value))

    def cancel(self) -> None:
        """Drop the pending run, if any."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the pending run to finish or be cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def _run(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        try:
            result = self.callback(value)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Debounced callback failed for {value!r}: {e}", exc_info=True)
        finally:
            if self._task is asyncio.current_task():
                self._task = None
