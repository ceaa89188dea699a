import asyncio
import base64
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from contentvault.clipboard.base import (
    HTML,
    IMAGE_TYPES,
    PLAIN_TEXT,
    URI_LIST,
    CaptureEvent,
    CapturedFile,
)
from contentvault.models import ContentItem, ContentType

logger = logging.getLogger(__name__)


class IngestStatus(str, Enum):
    ADDED = "added"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestResult:
    status: IngestStatus
    item: Optional[ContentItem] = None
    error: Optional[str] = None

    @property
    def added(self) -> bool:
        return self.status is IngestStatus.ADDED

    @classmethod
    def empty(cls) -> "IngestResult":
        return cls(status=IngestStatus.EMPTY)

    @classmethod
    def failed(cls, error: str) -> "IngestResult":
        return cls(status=IngestStatus.FAILED, error=error)


@dataclass(frozen=True)
class Classification:
    type: ContentType
    content: str = ""
    file: Optional[CapturedFile] = None


def classify(event: CaptureEvent) -> Optional[Classification]:
    """Pick the richest representation offered: html, uri-list, image, plain text."""
    html = event.get_data(HTML)
    if html:
        return Classification(ContentType.ARTICLE, html)

    uri_list = event.get_data(URI_LIST)
    if uri_list:
        return Classification(ContentType.LINK, uri_list)

    if any(tag in IMAGE_TYPES for tag in event.types):
        image = event.first_file(IMAGE_TYPES)
        if image is not None:
            return Classification(ContentType.IMAGE, file=image)

    text = event.get_data(PLAIN_TEXT)
    if text:
        return Classification(ContentType.TEXT, text)

    return None


def encode_data_uri(captured: CapturedFile) -> str:
    data = captured.read()
    if not data:
        return ""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{captured.mime};base64,{encoded}"


class IngestionPipeline:
    """Turns one capture event into at most one appended :class:`ContentItem`.

    Text, link and article captures are appended before :meth:`submit`
    returns. Images are encoded in an executor and appended when the encode
    finishes, so an image can land after a text capture made later.
    """

    def __init__(self, append: Callable[[ContentItem], None],
                 executor: Optional[Executor] = None) -> None:
        self._append = append
        self._executor = executor

    def submit(self, event: CaptureEvent) -> "asyncio.Future[IngestResult]":
        loop = asyncio.get_running_loop()
        classification = classify(event)

        if classification is not None and classification.file is not None:
            return loop.create_task(self._ingest_image(classification.file))

        future: "asyncio.Future[IngestResult]" = loop.create_future()
        if classification is None:
            logger.debug("Capture offered no usable content, ignoring")
            future.set_result(IngestResult.empty())
        else:
            item = ContentItem.create(classification.type, classification.content)
            future.set_result(self._commit(item))
        return future

    async def ingest(self, event: CaptureEvent) -> IngestResult:
        return await self.submit(event)

    async def _ingest_image(self, captured: CapturedFile) -> IngestResult:
        loop = asyncio.get_running_loop()
        try:
            content = await loop.run_in_executor(self._executor, encode_data_uri, captured)
        except Exception as e:
            logger.error(f"Dropping image capture {captured.name or captured.mime}: {e}")
            return IngestResult.failed(str(e))

        if not content:
            logger.debug("Image capture was empty, ignoring")
            return IngestResult.empty()

        return self._commit(ContentItem.create(ContentType.IMAGE, content))

    def _commit(self, item: ContentItem) -> IngestResult:
        self._append(item)
        logger.info(f"Captured {item.type.value}: {item.id}")
        return IngestResult(status=IngestStatus.ADDED, item=item)
