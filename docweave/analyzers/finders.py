"""Path-pattern finders for configuration, test and documentation files."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

from .base import Extractor
from ..models import FileDescriptor

MAX_CONFIG_FILES = 20
MAX_TEST_FILES = 30
MAX_DOCUMENTATION_FILES = 20

CONFIG_FILENAMES = {
    "package.json",
    "tsconfig.json",
    "jsconfig.json",
    "pyproject.toml",
    "setup.py",
    "setup.cfg",
    "tox.ini",
    "requirements.txt",
    "Pipfile",
    "Cargo.toml",
    "go.mod",
    "pom.xml",
    "build.gradle",
    "build.gradle.kts",
    "Gemfile",
    "composer.json",
    "Dockerfile",
    "docker-compose.yml",
    "docker-compose.yaml",
    "Makefile",
    "Procfile",
    ".gitignore",
    ".dockerignore",
    ".editorconfig",
    ".nvmrc",
    ".babelrc",
    ".prettierrc",
    ".eslintrc",
    ".eslintrc.js",
    ".eslintrc.json",
    ".gitlab-ci.yml",
}

CONFIG_EXTENSIONS = {".yml", ".yaml", ".toml", ".ini", ".cfg", ".conf", ".properties"}

TEST_NAME_SUFFIXES = (
    "_test.py",
    "_test.go",
    "_spec.rb",
    "Test.java",
    "Tests.java",
    "Test.kt",
    "Tests.cs",
)

DOCUMENTATION_EXTENSIONS = {".md", ".mdx", ".rst", ".adoc"}
DOCUMENTATION_DIRS = ("docs/", "doc/", "documentation/")


class ConfigFileFinder(Extractor):
    """Lists configuration files, capped at MAX_CONFIG_FILES."""

    name = "config_files"

    def empty(self) -> Tuple[str, ...]:
        return ()

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> Tuple[str, ...]:
        return _capped(files, is_config_file, MAX_CONFIG_FILES)


class TestFileFinder(Extractor):
    """Lists test files, capped at MAX_TEST_FILES."""

    __test__ = False  # not a pytest class

    name = "test_files"

    def empty(self) -> Tuple[str, ...]:
        return ()

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> Tuple[str, ...]:
        return _capped(files, is_test_file, MAX_TEST_FILES)


class DocumentationFileFinder(Extractor):
    """Lists documentation files, capped at MAX_DOCUMENTATION_FILES."""

    name = "documentation_files"

    def empty(self) -> Tuple[str, ...]:
        return ()

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> Tuple[str, ...]:
        return _capped(files, is_documentation_file, MAX_DOCUMENTATION_FILES)


def is_config_file(file: FileDescriptor) -> bool:
    name = file.name
    if name in CONFIG_FILENAMES:
        return True
    if name.startswith(".env"):
        return True
    if ".config." in name or name.endswith(("rc.json", "rc.js")):
        return True
    if file.extension in CONFIG_EXTENSIONS:
        return True
    return file.relative_path.startswith(("config/", "configs/"))


def is_test_file(file: FileDescriptor) -> bool:
    path = file.relative_path.lower()
    if "test" in path or "spec" in path:
        return True
    return file.name.endswith(TEST_NAME_SUFFIXES)


def is_documentation_file(file: FileDescriptor) -> bool:
    if file.extension in DOCUMENTATION_EXTENSIONS:
        return True
    return file.relative_path.lower().startswith(DOCUMENTATION_DIRS)


def _capped(files: Sequence[FileDescriptor], predicate, limit: int) -> Tuple[str, ...]:
    # Hard cap: matches beyond the limit are dropped, not sampled.
    found: List[str] = []
    for file in files:
        if file.is_directory or not predicate(file):
            continue
        found.append(file.relative_path)
        if len(found) >= limit:
            break
    return tuple(found)
