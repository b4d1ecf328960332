from __future__ import annotations

from pathlib import Path
from typing import List

from gatherer.adapters.storage.async_executor_service import run_coroutine_blocking
from gatherer.adapters.storage.async_file_tools import AsyncFileTools, printable_name
from gatherer.core.extensions import extract_extension, is_text_extension
from gatherer.logging import log_event
from gatherer.schema import ScanResult


class SkipCounter:
    """
    Traversal callbacks for one operation: logs each unlistable directory and
    each entry whose type could not be read, and counts them separately.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.count = 0
        self.entries = 0

    def __call__(self, path: Path, exc: OSError) -> None:
        self.count += 1
        log_event(
            "directory_skipped",
            {"operation": self.operation, "path": printable_name(str(path)), "error": printable_name(str(exc))},
            level="warning",
        )

    def entry_failed(self, path: Path, exc: OSError) -> None:
        self.entries += 1
        log_event(
            "entry_skipped",
            {"operation": self.operation, "path": printable_name(str(path)), "error": printable_name(str(exc))},
            level="warning",
        )


async def scan(root: Path | str) -> ScanResult:
    """
    Lists the distinct allow-listed extensions under root, sorted ordinally.
    Only file names are touched; contents are never opened.
    """
    fs = AsyncFileTools(root)
    log_event("scan_started", {"root": str(root)})
    skipped = SkipCounter("scan")
    files = await fs.list_files(on_skip=skipped, on_entry_error=skipped.entry_failed)

    found = set()
    for path in files:
        ext = extract_extension(path.name)
        if ext and is_text_extension(ext):
            found.add(ext)

    result = ScanResult(
        root=str(root),
        extensions=sorted(found),
        directories_skipped=skipped.count,
        entries_skipped=skipped.entries,
    )
    log_event(
        "scan_completed",
        {
            "root": str(root),
            "files_seen": len(files),
            "extensions": result.extensions,
            "directories_skipped": skipped.count,
            "entries_skipped": skipped.entries,
        },
    )
    return result


async def scan_extensions(root: Path | str) -> List[str]:
    return (await scan(root)).extensions


def scan_extensions_sync(root: Path | str) -> List[str]:
    return run_coroutine_blocking(scan_extensions(root))
