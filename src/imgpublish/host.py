"""Host collaborators: document access, file storage, clipboard, notices.

The pipeline only talks to the host through the protocols below.  The
concrete classes back them with a local vault directory so that the
package can run outside an editor (see :mod:`imgpublish.cli`).
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Protocol, TextIO, runtime_checkable

from imgpublish.observability import get_logger

log = get_logger("imgpublish.host")


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

@runtime_checkable
class FileStorage(Protocol):
    """Resolves storage-relative paths to binary content."""

    async def exists(self, path: str) -> bool:
        ...

    async def read_binary(self, path: str) -> bytes:
        ...


@runtime_checkable
class Document(Protocol):
    """The note being published."""

    def get_current_text(self) -> str:
        ...

    def set_current_text(self, text: str) -> None:
        ...

    def get_active_document_path(self) -> str | None:
        ...


@runtime_checkable
class Clipboard(Protocol):
    async def write_text(self, text: str) -> None:
        ...


@runtime_checkable
class Notifier(Protocol):
    """One-shot, timed user-visible messages."""

    def notify(self, message: str, duration_ms: int | None = None) -> None:
        ...


# ---------------------------------------------------------------------------
# Local implementations
# ---------------------------------------------------------------------------

class LocalVaultStorage:
    """File storage rooted at a vault directory on disk.

    Paths that escape the vault root are reported as missing.

    Parameters
    ----------
    root:
        The vault directory.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _locate(self, path: str) -> Path | None:
        candidate = (self._root / path.lstrip("/")).resolve()
        if not candidate.is_relative_to(self._root):
            log.warning(
                "Path escapes vault root",
                extra={"extra_fields": {"op": "locate", "path": path}},
            )
            return None
        return candidate

    async def exists(self, path: str) -> bool:
        candidate = self._locate(path)
        return candidate is not None and candidate.is_file()

    async def read_binary(self, path: str) -> bytes:
        candidate = self._locate(path)
        if candidate is None:
            raise FileNotFoundError(path)
        # Read in an executor to avoid blocking the event loop.
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, candidate.read_bytes)


class FileDocument:
    """A note file inside a vault, acting as the active document.

    Parameters
    ----------
    vault:
        The vault directory.
    note_path:
        Path of the note relative to *vault*.  When the file does not
        exist there is no active document.
    encoding:
        Text encoding used to read and write the note.
    """

    def __init__(self, vault: str | Path, note_path: str, encoding: str = "utf-8") -> None:
        self._vault = Path(vault).expanduser().resolve()
        self._note_path = note_path.replace("\\", "/").lstrip("/")
        self._encoding = encoding

    @property
    def file_path(self) -> Path:
        return self._vault / self._note_path

    def get_active_document_path(self) -> str | None:
        if not self.file_path.is_file():
            return None
        return self._note_path

    def get_current_text(self) -> str:
        if not self.file_path.is_file():
            return ""
        # Line endings are kept exactly as stored.
        return self.file_path.read_bytes().decode(self._encoding)

    def set_current_text(self, text: str) -> None:
        self.file_path.write_bytes(text.encode(self._encoding))


class StreamClipboard:
    """Clipboard stand-in that writes published text to a stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def write_text(self, text: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(text)
        stream.flush()


class LogNotifier:
    """Notifier that records every notice as a structured log line."""

    def __init__(self, logger: Any | None = None) -> None:
        self._log = logger or get_logger("imgpublish.notice")

    def notify(self, message: str, duration_ms: int | None = None) -> None:
        # Timed notices are the warning ones; confirmations carry no duration.
        emit = self._log.warning if duration_ms else self._log.info
        emit(
            message,
            extra={"extra_fields": {"op": "notify", "duration_ms": duration_ms}},
        )
