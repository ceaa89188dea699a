import asyncio
import hashlib
import logging
from typing import Any, Callable, List, Optional, Set

from contentvault.clipboard import CaptureEvent, ClipboardReader, get_clipboard_reader

logger = logging.getLogger(__name__)

CaptureHandler = Callable[[CaptureEvent], Any]


def fingerprint(event: CaptureEvent) -> Optional[str]:
    if not event.representations and not event.files:
        return None

    digest = hashlib.md5()
    for tag in sorted(event.representations):
        digest.update(tag.encode("utf-8"))
        digest.update(event.representations[tag].encode("utf-8"))
    for captured in event.files:
        digest.update(captured.mime.encode("utf-8"))
        digest.update(captured.read()[:1024])
    return digest.hexdigest()


class ClipboardService:
    """Polls the system clipboard on the event loop and publishes paste events."""

    def __init__(
        self,
        reader: Optional[ClipboardReader] = None,
        poll_interval: float = 0.25,
    ) -> None:
        self._reader = reader
        self.poll_interval = poll_interval
        self._handlers: List[CaptureHandler] = []
        self._pending: Set[asyncio.Future] = set()
        self._task: Optional["asyncio.Task[None]"] = None
        self._last_hash: Optional[str] = None
        self._first_run = True

    @property
    def reader(self) -> ClipboardReader:
        if self._reader is None:
            self._reader = get_clipboard_reader()
        return self._reader

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, handler: CaptureHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: CaptureEvent) -> None:
        """Hand ``event`` to every handler.

        Handlers that return an unfinished future (an image still encoding)
        are tracked until it settles so :meth:`stop` can wait for them.
        """
        for handler in list(self._handlers):
            try:
                result = handler(event)
            except Exception as e:
                logger.error(f"Error in capture handler: {e}")
                continue
            if asyncio.isfuture(result) and not result.done():
                self._pending.add(result)
                result.add_done_callback(self._pending.discard)

    def start(self) -> None:
        if self.is_running:
            return
        if self._reader is None:
            self._reader = get_clipboard_reader()
        self._first_run = True
        self._task = asyncio.get_running_loop().create_task(self._poll_loop())

    async def stop(self) -> None:
        if self._task is not None:
            task, self._task = self._task, None
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.drain()

    async def drain(self) -> None:
        """Wait for captures already handed to handlers to finish."""
        while self._pending:
            logger.debug(f"Waiting for {len(self._pending)} pending capture(s)")
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def poll_once(self) -> bool:
        """Read the clipboard once; publish and return True if it changed."""
        loop = asyncio.get_running_loop()
        try:
            event = await loop.run_in_executor(None, self.reader.read_event)
            current_hash = fingerprint(event)
        except Exception as e:
            logger.warning(f"Error reading clipboard: {e}")
            return False

        if self._first_run:
            self._last_hash = current_hash
            self._first_run = False
            return False

        if current_hash is None or current_hash == self._last_hash:
            return False

        self._last_hash = current_hash
        logger.debug(f"Clipboard changed: {', '.join(event.types)}")
        self.publish(event)
        return True

    async def run_forever(self) -> None:
        self.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.stop()

    async def _poll_loop(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.poll_interval)

    async def __aenter__(self) -> "ClipboardService":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
