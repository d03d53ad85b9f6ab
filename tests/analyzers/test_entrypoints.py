"""Tests for the entry point extractor."""

from __future__ import annotations

from pathlib import Path

from docweave.analyzers.entrypoints import MAX_ENTRY_POINTS, EntryPointExtractor
from docweave.models import FileDescriptor


def _file(path: str) -> FileDescriptor:
    return FileDescriptor(name=path.rsplit("/", 1)[-1], relative_path=path, is_directory=False)


def test_entry_points_sorted_by_tier_then_walk_order() -> None:
    files = [
        _file("cli.py"),
        _file("server/app.py"),
        _file("src/index.js"),
        _file("manage.py"),
        _file("cmd/main.go"),
        _file("README.md"),
    ]

    result = EntryPointExtractor().extract(files, Path("."))

    assert result == ("src/index.js", "cmd/main.go", "server/app.py", "manage.py", "cli.py")


def test_entry_points_found_in_walked_repository(repo_builder) -> None:
    repo_builder.write({"src/index.js": "console.log('hi');\n", "package.json": "{}"})

    result = EntryPointExtractor().extract(repo_builder.walk(), repo_builder.path())

    assert result == ("src/index.js",)


def test_entry_points_are_capped() -> None:
    files = [_file(f"svc{index}/main.py") for index in range(MAX_ENTRY_POINTS + 5)]

    result = EntryPointExtractor().extract(files, Path("."))

    assert len(result) == MAX_ENTRY_POINTS
    assert result[0] == "svc0/main.py"
