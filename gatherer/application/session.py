"""
Gather session.

Holds what a front end needs between calls: the root, the output path, the
extensions found by the last scan with their checkbox state, and a status
line. Operations return {"ok": ...} dicts instead of raising so a UI can show
the outcome directly.
"""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from gatherer.adapters.sinks import ClipboardSink, ExportSink, FileSink
from gatherer.exceptions import ExportCancelled, GathererError
from gatherer.logging import log_event
from gatherer.runtime_paths import resolve_output_dir
from gatherer.schema import ExtensionItem
from gatherer.services import exporter, scanner
from gatherer.settings import get_setting
from gatherer.time_utils import export_timestamp

STATUS_START = "Select a root directory to begin."
STATUS_SCAN_FIRST = "Click 'Scan Directory' to find file types."
STATUS_SELECT_EXTENSION = "Select at least one file type to export."
STATUS_READY = "Ready to export."
STATUS_SCANNING = "Scanning directory..."
STATUS_SCAN_FAILED = "Error occurred during scanning."
STATUS_EXPORTING = "Exporting files..."
STATUS_EXPORTED = "Export completed successfully!"
STATUS_COPIED = "Copied to clipboard."
STATUS_EXPORT_FAILED = "Error occurred during export."
STATUS_EXPORT_CANCELLED = "Export cancelled."


def default_output_path(root: Path, output_dir: Optional[Path] = None) -> Path:
    output_dir = output_dir or resolve_output_dir(get_setting("gatherer_output_dir"))
    return output_dir / f"{root.name}_{export_timestamp()}.txt"


class GatherSession:
    def __init__(self):
        self.root_path: Optional[Path] = None
        self.output_path: Optional[Path] = None
        self.extensions: List[ExtensionItem] = []
        self.is_processing = False
        self._status_message = ""
        self._cancel_event = threading.Event()
        self.status_message = STATUS_START

    @property
    def status_message(self) -> str:
        return self._status_message

    @status_message.setter
    def status_message(self, value: str) -> None:
        if value == self._status_message:
            return
        self._status_message = value
        log_event("status_changed", {"status": value})

    # ---------------------------------------------------------
    # Paths
    # ---------------------------------------------------------

    def set_root(self, path: Path | str | None) -> None:
        self.root_path = Path(path) if path else None
        self.extensions = []
        if self.root_path is not None and self.root_path.is_dir():
            self.output_path = default_output_path(self.root_path)
        self._refresh_guidance()

    def set_output(self, path: Path | str | None) -> None:
        self.output_path = Path(path) if path else None
        self._refresh_guidance()

    @property
    def can_scan(self) -> bool:
        return self.root_path is not None and self.root_path.is_dir()

    @property
    def can_export(self) -> bool:
        return (
            self.root_path is not None
            and self.output_path is not None
            and any(item.is_checked for item in self.extensions)
        )

    def _refresh_guidance(self) -> None:
        """Points the status line at the next step once both paths are set."""
        if self.root_path is not None and self.output_path is not None:
            if not self.extensions:
                self.status_message = STATUS_SCAN_FIRST
            elif not any(item.is_checked for item in self.extensions):
                self.status_message = STATUS_SELECT_EXTENSION
            else:
                self.status_message = STATUS_READY

    # ---------------------------------------------------------
    # Selection
    # ---------------------------------------------------------

    def set_checked(self, extension: str, checked: bool = True) -> None:
        wanted = extension.lower()
        for item in self.extensions:
            if item.extension == wanted:
                item.is_checked = checked
                self._refresh_guidance()
                return
        raise KeyError(f"Extension not found by the last scan: {extension}")

    def select_only(self, extensions: Iterable[str]) -> None:
        wanted = {ext.lower() for ext in extensions}
        for item in self.extensions:
            item.is_checked = item.extension in wanted
        self._refresh_guidance()

    def select_all(self) -> None:
        for item in self.extensions:
            item.is_checked = True
        self._refresh_guidance()

    def select_none(self) -> None:
        for item in self.extensions:
            item.is_checked = False
        self._refresh_guidance()

    def selected_extensions(self) -> List[str]:
        return [item.extension for item in self.extensions if item.is_checked]

    # ---------------------------------------------------------
    # Operations
    # ---------------------------------------------------------

    async def scan(self) -> Dict[str, Any]:
        if self.root_path is None:
            return {"ok": False, "error": "No root directory selected."}
        self.is_processing = True
        self.extensions = []
        self.status_message = STATUS_SCANNING
        try:
            result = await scanner.scan(self.root_path)
        except GathererError as exc:
            self.status_message = STATUS_SCAN_FAILED
            return {"ok": False, "error": str(exc)}
        finally:
            self.is_processing = False

        self.extensions = [ExtensionItem(extension=ext) for ext in result.extensions]
        self.status_message = f"Found {len(self.extensions)} file types."
        return {
            "ok": True,
            "extensions": list(result.extensions),
            "directories_skipped": result.directories_skipped,
            "entries_skipped": result.entries_skipped,
        }

    async def export_to_file(self) -> Dict[str, Any]:
        if self.output_path is None:
            return {"ok": False, "error": "No output file selected."}
        return await self._export(FileSink(self.output_path), STATUS_EXPORTED)

    async def export_to_clipboard(self) -> Dict[str, Any]:
        return await self._export(ClipboardSink(), STATUS_COPIED)

    def cancel(self) -> None:
        """Requests cancellation; checked between files of a running export."""
        self._cancel_event.set()

    async def _export(self, sink: ExportSink, done_status: str) -> Dict[str, Any]:
        if self.root_path is None:
            return {"ok": False, "error": "No root directory selected."}
        selected = self.selected_extensions()
        if not selected:
            return {"ok": False, "error": STATUS_SELECT_EXTENSION}

        self.is_processing = True
        self._cancel_event.clear()
        self.status_message = STATUS_EXPORTING
        try:
            summary = await exporter.export(self.root_path, selected, sink, cancel_event=self._cancel_event)
        except ExportCancelled as exc:
            self.status_message = STATUS_EXPORT_CANCELLED
            return {"ok": False, "error": str(exc), "cancelled": True}
        except GathererError as exc:
            self.status_message = STATUS_EXPORT_FAILED
            return {"ok": False, "error": str(exc)}
        finally:
            self.is_processing = False

        self.status_message = done_status
        return {"ok": True, "summary": summary}
