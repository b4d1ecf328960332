"""
Async File Tools

Directory enumeration and text reads for the scanner and exporter.
Listing is blocking (os.scandir) and runs in the default executor; reads go
through aiofiles. Symlinked directories are never descended into.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Callable, List, Optional

import aiofiles

from gatherer.adapters.storage.async_executor_service import run_coroutine_blocking
from gatherer.exceptions import AccessDenied, FileReadFailure, PathNotFound

SkipCallback = Callable[[Path, OSError], None]


class AsyncFileTools:
    """
    Service for non-blocking traversal and reads under a single root.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self._resolved_root: Optional[Path] = None

    def resolve_root(self) -> Path:
        """
        Validates the root: it must exist, be a directory and be listable.
        """
        root = self.root
        if not root.exists():
            raise PathNotFound(f"Root path not found: {root}")
        if not root.is_dir():
            raise PathNotFound(f"Root path is not a directory: {root}")
        resolved = root.resolve()
        try:
            with os.scandir(resolved):
                pass
        except PermissionError as exc:
            raise AccessDenied(f"Access denied: {root} ({exc.strerror or exc})") from exc
        except OSError as exc:
            raise AccessDenied(f"Cannot list root path {root}: {exc}") from exc
        self._resolved_root = resolved
        return resolved

    def walk_files_blocking(
        self,
        on_skip: Optional[SkipCallback] = None,
        on_entry_error: Optional[SkipCallback] = None,
    ) -> List[Path]:
        """
        Lists every file below the root. Subdirectories that cannot be listed
        are reported to on_skip and skipped; the root itself must be listable.
        Entries whose type cannot be determined go to on_entry_error.
        """
        root = self.resolve_root()
        files: List[Path] = []
        pending = [root]
        while pending:
            current = pending.pop()
            try:
                with os.scandir(current) as entries:
                    for entry in entries:
                        try:
                            if entry.is_dir(follow_symlinks=False):
                                pending.append(Path(entry.path))
                            elif entry.is_file():
                                files.append(Path(entry.path))
                        except OSError as exc:
                            if on_entry_error is not None:
                                on_entry_error(Path(entry.path), exc)
            except OSError as exc:
                if current == root:
                    raise AccessDenied(f"Cannot list root path {self.root}: {exc}") from exc
                if on_skip is not None:
                    on_skip(current, exc)
        return files

    async def list_files(
        self,
        on_skip: Optional[SkipCallback] = None,
        on_entry_error: Optional[SkipCallback] = None,
    ) -> List[Path]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.walk_files_blocking, on_skip, on_entry_error)

    async def read_text(self, path: Path | str) -> str:
        """
        Reads a whole file as strict UTF-8 without newline translation.
        A leading byte-order mark is dropped.
        """
        try:
            async with aiofiles.open(path, mode="r", encoding="utf-8-sig", newline="") as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise FileReadFailure(_describe_read_error(exc)) from exc

    def relative_posix(self, path: Path) -> str:
        """Root-relative path with '/' separators, always encodable as UTF-8."""
        root = self._resolved_root or self.root.resolve()
        return printable_name(path.relative_to(root).as_posix())

    def list_files_sync(
        self,
        on_skip: Optional[SkipCallback] = None,
        on_entry_error: Optional[SkipCallback] = None,
    ) -> List[Path]:
        return run_coroutine_blocking(self.list_files(on_skip, on_entry_error))

    def read_text_sync(self, path: Path | str) -> str:
        return run_coroutine_blocking(self.read_text(path))


def printable_name(name: str) -> str:
    """
    Undecodable bytes in a file name (kept by the OS as surrogate escapes)
    are rendered as backslash escapes, e.g. 'caf\\xe9.py'.
    """
    return os.fsencode(name).decode("utf-8", "backslashreplace")


def _describe_read_error(exc: BaseException) -> str:
    if isinstance(exc, FileNotFoundError):
        return f"File not found: {printable_name(str(exc.filename))}"
    if isinstance(exc, PermissionError):
        return f"Access denied: {printable_name(str(exc.filename))}"
    return printable_name(str(exc))
