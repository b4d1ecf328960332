import os

import pytest

from gatherer.adapters.storage.async_file_tools import AsyncFileTools, printable_name
from gatherer.exceptions import AccessDenied, FileReadFailure, PathNotFound


def test_resolve_root_rejects_missing_and_non_directory(tmp_path):
    (tmp_path / "file.txt").write_text("x", encoding="utf-8")

    with pytest.raises(PathNotFound):
        AsyncFileTools(tmp_path / "nope").resolve_root()
    with pytest.raises(PathNotFound):
        AsyncFileTools(tmp_path / "file.txt").resolve_root()


def test_resolve_root_reports_unlistable_root_as_access_denied(source_root, monkeypatch):
    def denied(path):
        raise PermissionError(13, "Permission denied", os.fspath(path))

    monkeypatch.setattr(os, "scandir", denied)

    with pytest.raises(AccessDenied):
        AsyncFileTools(source_root).resolve_root()


def test_walk_lists_nested_files_and_reports_skips(make_tree, monkeypatch):
    root = make_tree({"a.txt": "", "x/b.txt": "", "x/y/c.txt": "", "z/d.txt": ""})
    real_scandir = os.scandir
    skipped = []

    def guarded_scandir(path):
        if os.path.basename(os.fspath(path)) == "z":
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", guarded_scandir)

    fs = AsyncFileTools(root)
    files = fs.walk_files_blocking(on_skip=lambda path, exc: skipped.append(path.name))

    assert sorted(fs.relative_posix(p) for p in files) == ["a.txt", "x/b.txt", "x/y/c.txt"]
    assert skipped == ["z"]


def test_walk_handles_large_flat_trees_without_reading_contents(source_root):
    for i in range(2000):
        (source_root / f"f{i}.log").touch()

    assert len(AsyncFileTools(source_root).walk_files_blocking()) == 2000


@pytest.mark.asyncio
async def test_read_text_wraps_decode_and_missing_errors(make_tree):
    root = make_tree({"bad.txt": b"\xc3\x28"})
    fs = AsyncFileTools(root)

    with pytest.raises(FileReadFailure, match="can't decode"):
        await fs.read_text(root / "bad.txt")
    with pytest.raises(FileReadFailure, match="File not found"):
        await fs.read_text(root / "gone.txt")


def test_read_text_sync_preserves_newlines(make_tree):
    root = make_tree({"a.txt": "one\r\ntwo\rthree\n"})

    assert AsyncFileTools(root).read_text_sync(root / "a.txt") == "one\r\ntwo\rthree\n"


def test_printable_name_escapes_undecodable_bytes():
    assert printable_name("caf\udce9.py") == "caf\\xe9.py"
    assert printable_name("café/a.py") == "café/a.py"


def test_walk_reports_unreadable_entries_separately(make_tree, monkeypatch):
    root = make_tree({"a.txt": "", "flaky.txt": ""})
    real_scandir = os.scandir
    skipped, unreadable = [], []

    class BrokenEntry:
        def __init__(self, path):
            self.path = path
            self.name = os.path.basename(path)

        def is_dir(self, follow_symlinks=True):
            raise PermissionError(13, "Permission denied", self.path)

        def is_file(self, follow_symlinks=True):
            raise PermissionError(13, "Permission denied", self.path)

    class Listing:
        def __init__(self, inner):
            self.inner = inner

        def __enter__(self):
            self.inner.__enter__()
            return self

        def __exit__(self, *exc_info):
            return self.inner.__exit__(*exc_info)

        def __iter__(self):
            for entry in self.inner:
                yield BrokenEntry(entry.path) if entry.name == "flaky.txt" else entry

    monkeypatch.setattr(os, "scandir", lambda path: Listing(real_scandir(path)))

    files = AsyncFileTools(root).walk_files_blocking(
        on_skip=lambda path, exc: skipped.append(path.name),
        on_entry_error=lambda path, exc: unreadable.append(path.name),
    )

    assert [p.name for p in files] == ["a.txt"]
    assert skipped == []
    assert unreadable == ["flaky.txt"]
