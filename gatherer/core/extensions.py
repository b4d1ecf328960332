"""
Extension allow-list and extension extraction.

An extension is everything from the last '.' of a file name to its end,
lower-cased. Dot-files keep their whole name ('.gitignore'); a name with no
'.' or ending in '.' has no extension.
"""
from __future__ import annotations

from typing import Iterable, Optional

TEXT_EXTENSIONS: frozenset[str] = frozenset({
    ".cs", ".py", ".js", ".ts", ".jsx", ".tsx", ".java", ".cpp", ".c", ".h",
    ".hpp", ".xml", ".json", ".yaml", ".yml", ".md", ".txt", ".html", ".css",
    ".scss", ".sass", ".less", ".sql", ".sh", ".bat", ".ps1", ".rb", ".go",
    ".rs", ".swift", ".kt", ".php", ".r", ".m", ".mm", ".scala", ".groovy",
    ".lua", ".dart", ".vue", ".svelte", ".astro", ".ini", ".config", ".conf",
    ".toml", ".properties", ".env", ".gitignore", ".dockerignore", ".editorconfig",
    ".csv", ".log", ".diff", ".patch", ".asm", ".pl", ".pm", ".hs", ".clj",
    ".razor", ".fs", ".vb", ".vbs", ".asmx", ".aspx", ".jsp", ".jspx",
})


def extract_extension(file_name: str) -> Optional[str]:
    index = file_name.rfind(".")
    if index < 0 or index == len(file_name) - 1:
        return None
    return file_name[index:].lower()


def is_text_extension(extension: str) -> bool:
    return str(extension or "").lower() in TEXT_EXTENSIONS


def normalize_selection(extensions: Iterable[str]) -> frozenset[str]:
    """Lower-cases a caller's selection for case-insensitive membership tests."""
    return frozenset(str(ext).lower() for ext in extensions if str(ext or "").strip())


def coerce_extension(raw: str) -> str:
    """Accepts 'py', '.py' or '.PY' from user input and returns '.py'."""
    value = str(raw or "").strip().lower()
    if not value:
        raise ValueError("Extension must not be empty.")
    return value if value.startswith(".") else f".{value}"
