"""Tests for the language extractor."""

from __future__ import annotations

from pathlib import Path

from docweave.analyzers.language import LanguageExtractor
from docweave.models import FileDescriptor, LanguageCount


def _file(path: str) -> FileDescriptor:
    name = path.rsplit("/", 1)[-1]
    return FileDescriptor(
        name=name,
        relative_path=path,
        is_directory=False,
        size=10,
        extension=Path(name).suffix.lower(),
    )


def test_language_counts_sorted_descending() -> None:
    files = [
        _file("a.py"),
        _file("b.ts"),
        _file("c.ts"),
        _file("d.tsx"),
        _file("e.py"),
        _file("notes.txt"),
        FileDescriptor(name="src", relative_path="src", is_directory=True),
    ]

    result = LanguageExtractor().extract(files, Path("."))

    assert result == (
        LanguageCount(language="TypeScript", file_count=3),
        LanguageCount(language="Python", file_count=2),
    )


def test_language_ties_keep_first_encountered_order() -> None:
    files = [_file("main.go"), _file("lib.rs"), _file("app.rb")]

    result = LanguageExtractor().extract(files, Path("."))

    assert [item.language for item in result] == ["Go", "Rust", "Ruby"]


def test_language_unlisted_extensions_are_ignored() -> None:
    assert LanguageExtractor().extract([_file("data.csv"), _file("LICENSE")], Path(".")) == ()
