"""Shared test fixtures for the imgpublish test suite."""

from __future__ import annotations

import asyncio

import pytest

from imgpublish.config import PublishConfig


class FakeStorage:
    """In-memory file storage keyed by storage-relative path."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})
        self.reads: list[str] = []

    async def exists(self, path: str) -> bool:
        return path in self.files

    async def read_binary(self, path: str) -> bytes:
        self.reads.append(path)
        return self.files[path]


class FakeBackend:
    """Backend returning ``https://cdn.test/<filename>``.

    *failures* maps a filename hint to the exception raised for it;
    *delays* maps a filename hint to seconds slept before answering.
    """

    def __init__(
        self,
        failures: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls: list[tuple[bytes, str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def upload(self, content: bytes, filename_hint: str, mime_type: str) -> str:
        self.calls.append((content, filename_hint, mime_type))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(filename_hint, 0))
            if filename_hint in self.failures:
                raise self.failures[filename_hint]
            return f"https://cdn.test/{filename_hint}"
        finally:
            self.in_flight -= 1


class FakeDocument:
    def __init__(self, text: str = "", path: str | None = "notes/post.md") -> None:
        self.text = text
        self.path = path
        self.writes: list[str] = []

    def get_current_text(self) -> str:
        return self.text

    def set_current_text(self, text: str) -> None:
        self.writes.append(text)
        self.text = text

    def get_active_document_path(self) -> str | None:
        return self.path


class RecordingClipboard:
    def __init__(self) -> None:
        self.texts: list[str] = []

    async def write_text(self, text: str) -> None:
        self.texts.append(text)


class RecordingNotifier:
    def __init__(self) -> None:
        self.notices: list[tuple[str, int | None]] = []

    def notify(self, message: str, duration_ms: int | None = None) -> None:
        self.notices.append((message, duration_ms))

    @property
    def messages(self) -> list[str]:
        return [message for message, _ in self.notices]


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def config() -> PublishConfig:
    """Default pipeline configuration."""
    return PublishConfig()


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clipboard() -> RecordingClipboard:
    return RecordingClipboard()


@pytest.fixture
def make_storage():
    return FakeStorage


@pytest.fixture
def make_backend():
    return FakeBackend


@pytest.fixture
def make_document():
    return FakeDocument
