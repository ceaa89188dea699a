import mimetypes
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Tuple

HTML = "text/html"
URI_LIST = "text/uri-list"
PLAIN_TEXT = "text/plain"
IMAGE_TYPES = ("image/png", "image/jpeg")


@dataclass(frozen=True)
class CapturedFile:
    """Binary attachment of a capture. Bytes are only read when ``read`` is called."""
    mime: str
    loader: Callable[[], bytes] = field(repr=False, compare=False)
    name: str = ""

    def read(self) -> bytes:
        return self.loader()

    @classmethod
    def from_bytes(cls, mime: str, data: bytes, name: str = "") -> "CapturedFile":
        return cls(mime=mime, loader=lambda: data, name=name)

    @classmethod
    def from_path(cls, path: Path, mime: Optional[str] = None) -> "CapturedFile":
        path = Path(path)
        if mime is None:
            mime, _ = mimetypes.guess_type(str(path))
        return cls(mime=mime or "application/octet-stream",
                   loader=path.read_bytes, name=path.name)


@dataclass(frozen=True)
class CaptureEvent:
    """One paste: the offered (format tag, payload) pairs plus attached files."""
    representations: Mapping[str, str] = field(default_factory=dict)
    files: Tuple[CapturedFile, ...] = ()

    @property
    def types(self) -> Tuple[str, ...]:
        tags = list(self.representations)
        tags.extend(f.mime for f in self.files if f.mime not in tags)
        return tuple(tags)

    def get_data(self, format_tag: str) -> str:
        return self.representations.get(format_tag) or ""

    def first_file(self, mimes: Tuple[str, ...]) -> Optional[CapturedFile]:
        for captured in self.files:
            if captured.mime in mimes:
                return captured
        return None

    @classmethod
    def from_text(cls, text: str) -> "CaptureEvent":
        return cls(representations={PLAIN_TEXT: text})


class ClipboardReader(ABC):

    @abstractmethod
    def _read_representations(self) -> Tuple[Dict[str, str], Tuple[CapturedFile, ...]]:
        pass

    def read_event(self) -> CaptureEvent:
        representations, files = self._read_representations()
        return CaptureEvent(representations=representations, files=files)
