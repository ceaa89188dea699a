import os
import shutil
import subprocess
from typing import Callable, Dict, List, Optional, Tuple

from contentvault.clipboard.base import (
    HTML,
    PLAIN_TEXT,
    URI_LIST,
    CapturedFile,
    ClipboardReader,
)

Reader = Callable[[str], Optional[bytes]]


class LinuxClipboard(ClipboardReader):
    _MARKUP_TARGETS = {
        "text/html": HTML,
        "text/uri-list": URI_LIST,
    }
    _IMAGE_TARGETS = {
        "image/png": "image/png",
        "image/jpeg": "image/jpeg",
        "image/jpg": "image/jpeg",
        "image/pjpeg": "image/jpeg",
    }
    _TEXT_TARGETS = {
        "text/plain",
        "text/plain;charset=utf-8",
        "text/plain;charset=utf8",
        "utf8_string",
        "string",
    }

    def _read_representations(self) -> Tuple[Dict[str, str], Tuple[CapturedFile, ...]]:
        strategies = (
            self._from_wayland,
            self._from_xclip,
        )

        for strategy in strategies:
            result = strategy()
            if result is not None:
                return result

        return {}, ()

    def _from_wayland(self) -> Optional[Tuple[Dict[str, str], Tuple[CapturedFile, ...]]]:
        if not os.environ.get("WAYLAND_DISPLAY") or not shutil.which("wl-paste"):
            return None

        types = self._parse_type_list(
            self._run_command(["wl-paste", "--list-types"], timeout=1.5)
        )

        def reader(target: str) -> Optional[bytes]:
            command = ["wl-paste", "--type", target]
            if target.lower().startswith("text/"):
                command.append("--no-newline")
            return self._run_command(command, timeout=1.5)

        return self._extract_from_types(types, reader)

    def _from_xclip(self) -> Optional[Tuple[Dict[str, str], Tuple[CapturedFile, ...]]]:
        if not shutil.which("xclip"):
            return None

        types = self._parse_type_list(
            self._run_command(
                ["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"],
                timeout=1.5,
            )
        )

        def reader(target: str) -> Optional[bytes]:
            return self._run_command(
                ["xclip", "-selection", "clipboard", "-t", target, "-o"],
                timeout=1.5,
            )

        return self._extract_from_types(types, reader)

    def _extract_from_types(
        self,
        types: List[str],
        reader: Reader,
    ) -> Tuple[Dict[str, str], Tuple[CapturedFile, ...]]:
        representations: Dict[str, str] = {}
        files: List[CapturedFile] = []

        for target in types:
            target_lower = target.lower()

            if target_lower in self._MARKUP_TARGETS:
                tag = self._MARKUP_TARGETS[target_lower]
                if tag not in representations:
                    text = self._decode(reader(target))
                    if text:
                        representations[tag] = text

            elif target_lower in self._IMAGE_TARGETS:
                mime = self._IMAGE_TARGETS[target_lower]
                if any(f.mime == mime for f in files):
                    continue
                data = reader(target)
                if data:
                    representations.setdefault(mime, "")
                    files.append(CapturedFile.from_bytes(mime, data))

            elif target_lower in self._TEXT_TARGETS and PLAIN_TEXT not in representations:
                text = self._decode(reader(target))
                if text:
                    representations[PLAIN_TEXT] = text

        return representations, tuple(files)

    @staticmethod
    def _decode(data: Optional[bytes]) -> str:
        if not data:
            return ""
        return data.decode("utf-8", errors="ignore")

    def _parse_type_list(self, data: Optional[bytes]) -> List[str]:
        if not data:
            return []
        text = data.decode("utf-8", errors="ignore")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _run_command(self, command: List[str], timeout: float) -> Optional[bytes]:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=timeout,
            )
            return result.stdout
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
            return None
