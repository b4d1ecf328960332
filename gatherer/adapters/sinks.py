"""
Export sinks.

Every sink receives the same text through write(); the only difference is
where it ends up once commit() is called. Output is UTF-8 without a BOM and
'\n' is never translated.
"""
from __future__ import annotations

import asyncio
import io
import os
import uuid
from pathlib import Path
from typing import Callable, Optional

import aiofiles
import pyperclip

from gatherer.exceptions import SinkWriteFailure
from gatherer.logging import log_event


class ExportSink:
    """Append-only text destination owned by a single export call."""

    label = "sink"

    def __init__(self) -> None:
        self.chars_written = 0

    async def open(self) -> None:
        return None

    async def write(self, text: str) -> None:
        raise NotImplementedError

    async def commit(self) -> str:
        """Finalizes the output and returns a label for the destination."""
        return self.label

    async def discard(self) -> None:
        return None


class BufferSink(ExportSink):
    label = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._buffer = io.StringIO(newline="")

    async def write(self, text: str) -> None:
        self._buffer.write(text)
        self.chars_written += len(text)

    def getvalue(self) -> str:
        return self._buffer.getvalue()

    async def discard(self) -> None:
        self._buffer = io.StringIO(newline="")
        self.chars_written = 0


class ClipboardSink(BufferSink):
    """Accumulates in memory and copies to the clipboard on commit."""

    label = "clipboard"

    def __init__(self, copy: Optional[Callable[[str], None]] = None) -> None:
        super().__init__()
        self._copy = copy

    async def commit(self) -> str:
        copy = self._copy or pyperclip.copy
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, copy, self.getvalue())
        except pyperclip.PyperclipException as exc:
            raise SinkWriteFailure(f"Clipboard unavailable: {exc}") from exc
        return self.label


class FileSink(ExportSink):
    """
    Writes to a temporary sibling of the destination and atomically replaces
    the destination on commit, so a failed or cancelled export leaves no
    partial file behind.
    """

    def __init__(self, path: Path | str) -> None:
        super().__init__()
        self.path = Path(path)
        self.label = str(self.path)
        self._temp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex[:8]}.tmp")
        self._handle = None

    async def open(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = await aiofiles.open(self._temp_path, mode="w", encoding="utf-8", newline="")
        except OSError as exc:
            raise SinkWriteFailure(f"Cannot write {self.path}: {exc}") from exc

    async def write(self, text: str) -> None:
        if self._handle is None:
            await self.open()
        try:
            await self._handle.write(text)
        except OSError as exc:
            raise SinkWriteFailure(f"Cannot write {self.path}: {exc}") from exc
        self.chars_written += len(text)

    async def _close(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            await handle.close()

    async def commit(self) -> str:
        if self._handle is None:
            await self.open()
        try:
            await self._close()
            os.replace(self._temp_path, self.path)
        except OSError as exc:
            await self.discard()
            raise SinkWriteFailure(f"Cannot write {self.path}: {exc}") from exc
        return self.label

    async def discard(self) -> None:
        try:
            await self._close()
        except OSError:
            # Closing a broken temp file; it is removed below either way.
            pass
        try:
            self._temp_path.unlink(missing_ok=True)
        except OSError as exc:
            log_event("sink_discard_failed", {"path": str(self._temp_path), "error": str(exc)}, level="warning")
