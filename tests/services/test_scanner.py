import os

import pytest

from gatherer.adapters.storage import async_file_tools
from gatherer.exceptions import PathInvalid, PathNotFound
from gatherer.logging import read_events
from gatherer.services.scanner import scan, scan_extensions, scan_extensions_sync


@pytest.mark.asyncio
async def test_scan_returns_sorted_distinct_lowercase_allow_listed_extensions(make_tree):
    root = make_tree({
        "a.CS": "class A {}",
        "b.cs": "class B {}",
        "src/main.py": "print(1)",
        "src/deep/notes.MD": "# notes",
        "assets/logo.png": b"\x89PNG",
        "bin/tool.exe": b"MZ",
        "Makefile": "all:",
        ".gitignore": "*.pyc",
    })

    extensions = await scan_extensions(root)

    assert extensions == [".cs", ".gitignore", ".md", ".py"]


@pytest.mark.asyncio
async def test_scan_never_reports_extensions_outside_allow_list(make_tree):
    root = make_tree({"photo.jpg": b"\xff\xd8", "data.bin": b"\x00", "archive.tar.gz": b"\x1f\x8b"})

    assert await scan_extensions(root) == []


@pytest.mark.asyncio
async def test_scan_empty_directory_returns_empty_list(source_root):
    assert await scan_extensions(source_root) == []


@pytest.mark.asyncio
async def test_scan_missing_root_raises_path_not_found(tmp_path):
    with pytest.raises(PathNotFound):
        await scan_extensions(tmp_path / "missing")


@pytest.mark.asyncio
async def test_scan_file_as_root_raises_path_invalid(make_tree):
    root = make_tree({"only.py": "x = 1"})

    with pytest.raises(PathInvalid):
        await scan_extensions(root / "only.py")


@pytest.mark.asyncio
async def test_scan_skips_unlistable_subdirectory_and_logs_it(make_tree, monkeypatch):
    root = make_tree({
        "ok/a.py": "a = 1",
        "locked/secret.rs": "fn main() {}",
    })
    real_scandir = os.scandir

    def guarded_scandir(path):
        if os.path.basename(os.fspath(path)) == "locked":
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(async_file_tools.os, "scandir", guarded_scandir)

    result = await scan(root)

    assert result.extensions == [".py"]
    assert result.directories_skipped == 1
    skipped = read_events(event="directory_skipped")
    assert len(skipped) == 1
    assert skipped[0]["data"]["path"].endswith("locked")
    assert skipped[0]["data"]["operation"] == "scan"


@pytest.mark.asyncio
async def test_scan_does_not_follow_symlinked_directories(make_tree, tmp_path):
    root = make_tree({"real/a.md": "# a"})
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "b.rs").write_text("fn main() {}", encoding="utf-8")
    try:
        os.symlink(outside, root / "linked", target_is_directory=True)
        os.symlink(root, root / "real" / "loop", target_is_directory=True)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not available on this platform")

    assert await scan_extensions(root) == [".md"]


@pytest.mark.asyncio
async def test_scan_logs_started_and_completed_events(make_tree):
    root = make_tree({"a.py": "", "b.txt": ""})

    await scan(root)

    completed = read_events(event="scan_completed")
    assert len(read_events(event="scan_started")) == 1
    assert completed[-1]["data"]["extensions"] == [".py", ".txt"]
    assert completed[-1]["data"]["files_seen"] == 2


def test_scan_extensions_sync_runs_outside_event_loop(make_tree):
    root = make_tree({"x.json": "{}", "y.yaml": "a: 1"})

    assert scan_extensions_sync(root) == [".json", ".yaml"]


@pytest.mark.asyncio
async def test_scan_extensions_sync_bridges_from_inside_running_loop(make_tree):
    root = make_tree({"x.toml": "a = 1"})

    assert scan_extensions_sync(root) == [".toml"]


@pytest.mark.asyncio
async def test_scan_counts_unreadable_entries_apart_from_directories(make_tree, monkeypatch):
    root = make_tree({"a.py": "a = 1", "odd.rs": "fn main() {}"})
    real_scandir = os.scandir

    class UnreadableEntry:
        def __init__(self, path):
            self.path = path

        def is_dir(self, follow_symlinks=True):
            raise OSError(5, "Input/output error", self.path)

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
                yield UnreadableEntry(entry.path) if entry.name == "odd.rs" else entry

    monkeypatch.setattr(async_file_tools.os, "scandir", lambda path: Listing(real_scandir(path)))

    result = await scan(root)

    assert result.extensions == [".py"]
    assert result.directories_skipped == 0
    assert result.entries_skipped == 1
    assert read_events(event="directory_skipped") == []
    entries = read_events(event="entry_skipped")
    assert len(entries) == 1
    assert entries[0]["data"]["path"].endswith("odd.rs")
