"""
Export writer.

Concatenates every file under a root whose extension is selected into one
text stream, one record per file in ordinal path order:

    === FILE: <relative/path> ===
    <blank>
    <content>
    <blank>
    === END OF FILE ===
    <blank>

A file that cannot be read is rendered with an error placeholder in place of
its content; the export carries on with the next file.
"""
from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from gatherer.adapters.sinks import BufferSink, ClipboardSink, ExportSink, FileSink
from gatherer.adapters.storage.async_executor_service import run_coroutine_blocking
from gatherer.adapters.storage.async_file_tools import AsyncFileTools
from gatherer.core.extensions import extract_extension, normalize_selection
from gatherer.exceptions import ExportCancelled, FileReadFailure
from gatherer.logging import log_event
from gatherer.schema import ExportSummary
from gatherer.services.scanner import SkipCounter

FILE_HEADER = "=== FILE: {path} ==="
FILE_FOOTER = "=== END OF FILE ==="
ERROR_PLACEHOLDER = "[ERROR READING FILE: {message}]"


@dataclass
class ExportRecord:
    relative_path: str
    content: str = ""
    error: Optional[str] = None

    def render(self) -> str:
        body = self.content if self.error is None else ERROR_PLACEHOLDER.format(message=self.error)
        header = FILE_HEADER.format(path=self.relative_path)
        return f"{header}\n\n{body}\n\n{FILE_FOOTER}\n\n"


async def export(
    root: Path | str,
    selected_extensions: Iterable[str],
    sink: ExportSink,
    cancel_event: Optional[threading.Event] = None,
) -> ExportSummary:
    fs = AsyncFileTools(root)
    selection = normalize_selection(selected_extensions)
    log_event("export_started", {"root": str(root), "extensions": sorted(selection), "sink": sink.label})

    skipped = SkipCounter("export")
    files = await fs.list_files(on_skip=skipped, on_entry_error=skipped.entry_failed)
    matched = sorted((p for p in files if extract_extension(p.name) in selection), key=str)

    written = 0
    failed = 0
    try:
        await sink.open()
        for path in matched:
            if cancel_event is not None and cancel_event.is_set():
                raise ExportCancelled(f"Export cancelled after {written} of {len(matched)} files.")
            record = ExportRecord(relative_path=fs.relative_posix(path))
            try:
                record.content = await fs.read_text(path)
            except FileReadFailure as exc:
                record.error = str(exc)
                failed += 1
                log_event("file_read_failed", {"path": record.relative_path, "error": record.error}, level="warning")
            await sink.write(record.render())
            written += 1
        chars = sink.chars_written
        destination = await sink.commit()
    except (ExportCancelled, asyncio.CancelledError):
        await sink.discard()
        log_event("export_cancelled", {"root": str(root), "files_written": written, "files_matched": len(matched)})
        raise
    except Exception as exc:
        await sink.discard()
        log_event("export_failed", {"root": str(root), "error": str(exc)}, level="error")
        raise

    summary = ExportSummary(
        destination=destination,
        files_written=written,
        files_failed=failed,
        chars_written=chars,
        directories_skipped=skipped.count,
        entries_skipped=skipped.entries,
    )
    log_event("export_completed", summary.model_dump())
    return summary


async def export_to_file(
    root: Path | str,
    selected_extensions: Iterable[str],
    output_path: Path | str,
    cancel_event: Optional[threading.Event] = None,
) -> ExportSummary:
    return await export(root, selected_extensions, FileSink(output_path), cancel_event=cancel_event)


async def export_to_string(root: Path | str, selected_extensions: Iterable[str]) -> str:
    sink = BufferSink()
    await export(root, selected_extensions, sink)
    return sink.getvalue()


async def export_to_clipboard(
    root: Path | str,
    selected_extensions: Iterable[str],
    cancel_event: Optional[threading.Event] = None,
) -> ExportSummary:
    return await export(root, selected_extensions, ClipboardSink(), cancel_event=cancel_event)


def export_sync(
    root: Path | str,
    selected_extensions: Iterable[str],
    sink: ExportSink,
    cancel_event: Optional[threading.Event] = None,
) -> ExportSummary:
    return run_coroutine_blocking(export(root, selected_extensions, sink, cancel_event=cancel_event))


def export_to_string_sync(root: Path | str, selected_extensions: Iterable[str]) -> str:
    return run_coroutine_blocking(export_to_string(root, selected_extensions))
