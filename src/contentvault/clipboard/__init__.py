from contentvault.clipboard.base import (
    HTML,
    IMAGE_TYPES,
    PLAIN_TEXT,
    URI_LIST,
    CaptureEvent,
    CapturedFile,
    ClipboardReader,
)
from contentvault.clipboard.factory import get_clipboard_class, get_clipboard_reader

__all__ = [
    'HTML',
    'IMAGE_TYPES',
    'PLAIN_TEXT',
    'URI_LIST',
    'CaptureEvent',
    'CapturedFile',
    'ClipboardReader',
    'get_clipboard_class',
    'get_clipboard_reader',
]
