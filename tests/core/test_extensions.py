import pytest

from gatherer.core.extensions import (
    TEXT_EXTENSIONS,
    coerce_extension,
    extract_extension,
    is_text_extension,
    normalize_selection,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("main.py", ".py"),
        ("Program.CS", ".cs"),
        ("archive.tar.gz", ".gz"),
        (".gitignore", ".gitignore"),
        (".env", ".env"),
        ("Makefile", None),
        ("trailing.", None),
    ],
)
def test_extract_extension_uses_last_dot_and_lowercases(name, expected):
    assert extract_extension(name) == expected


def test_allow_list_is_lowercase_with_leading_dot():
    assert all(ext.startswith(".") and ext == ext.lower() for ext in TEXT_EXTENSIONS)
    assert ".py" in TEXT_EXTENSIONS
    assert ".csv" in TEXT_EXTENSIONS
    assert ".png" not in TEXT_EXTENSIONS


def test_is_text_extension_is_case_insensitive():
    assert is_text_extension(".PY")
    assert is_text_extension(".Md")
    assert not is_text_extension(".exe")
    assert not is_text_extension("")


def test_normalize_selection_lowercases_and_drops_blanks():
    assert normalize_selection([".PY", ".md", "", "  "]) == frozenset({".py", ".md"})


def test_coerce_extension_accepts_bare_and_dotted_forms():
    assert coerce_extension("py") == ".py"
    assert coerce_extension(".TXT") == ".txt"
    with pytest.raises(ValueError):
        coerce_extension("  ")
