"""Compact tree rendering of a repository's top level."""

from __future__ import annotations

from typing import List, Sequence

from ..models import FileDescriptor

MAX_TOP_LEVEL_DIRS = 15
MAX_IMPORTANT_FILES = 10

IMPORTANT_FILES = {
    "package.json",
    "requirements.txt",
    "pyproject.toml",
    "setup.py",
    "Pipfile",
    "Cargo.toml",
    "go.mod",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "Gemfile",
    "composer.json",
    "tsconfig.json",
    "Dockerfile",
    "docker-compose.yml",
    "docker-compose.yaml",
    "Makefile",
    ".env.example",
}

_IMPORTANT_PREFIXES = ("readme", "license", "licence")


def render_structure(repo_name: str, files: Sequence[FileDescriptor]) -> str:
    """Render top-level directories then notable root files as a small tree."""
    directories = sorted(
        file.name for file in files if file.is_directory and "/" not in file.relative_path
    )[:MAX_TOP_LEVEL_DIRS]
    root_files = sorted(
        file.name
        for file in files
        if not file.is_directory and "/" not in file.relative_path and is_important(file.name)
    )[:MAX_IMPORTANT_FILES]

    entries: List[str] = [f"{name}/" for name in directories] + root_files
    lines = [f"{repo_name}/"]
    for index, entry in enumerate(entries):
        connector = "└── " if index == len(entries) - 1 else "├── "
        lines.append(f"{connector}{entry}")
    return "\n".join(lines)


def is_important(name: str) -> bool:
    return name in IMPORTANT_FILES or name.lower().startswith(_IMPORTANT_PREFIXES)


__all__ = ["render_structure", "is_important"]
