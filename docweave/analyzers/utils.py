"""Shared helper utilities for extractor implementations."""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

from ..models import FileDescriptor

# First character that cannot belong to a distribution name.
_REQUIREMENT_NAME_END = re.compile(r"===|==|>=|<=|~=|!=|>|<|;|\[|\(|@")


def root_file_names(files: Sequence[FileDescriptor]) -> Set[str]:
    """Return the names of non-directory entries at the repository root."""
    return {
        file.name
        for file in files
        if not file.is_directory and "/" not in file.relative_path
    }


def read_text(root: Path, relative: str, *, max_chars: int | None = None) -> Optional[str]:
    """Read a repository file as text, or None when it cannot be read."""
    path = root / relative
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    return text if max_chars is None else text[:max_chars]


@dataclass
class ManifestDependencies:
    """Dependency names from one manifest, in declared order."""

    production: List[str] = field(default_factory=list)
    development: List[str] = field(default_factory=list)


# Node.js


def load_package_json(root: Path) -> Optional[Dict[str, object]]:
    """Return parsed package.json, None when absent. Malformed JSON raises ValueError."""
    package_json = root / "package.json"
    if not package_json.is_file():
        return None
    data = json.loads(package_json.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("package.json must contain a JSON object")
    return data


def node_dependencies(package_json: Dict[str, object]) -> ManifestDependencies:
    def _extract(key: str) -> List[str]:
        deps = package_json.get(key)
        if isinstance(deps, dict):
            return list(deps.keys())
        return []

    return ManifestDependencies(
        production=_extract("dependencies"),
        development=_extract("devDependencies"),
    )


def detect_node_package_manager(names: Set[str]) -> str:
    """Infer the Node package manager from lockfiles, defaulting to npm."""
    if "pnpm-lock.yaml" in names:
        return "pnpm"
    if "yarn.lock" in names:
        return "yarn"
    if "bun.lockb" in names:
        return "bun"
    return "npm"


# Python


def requirement_name(line: str) -> Optional[str]:
    """Return the package name of one requirements line, or None for blanks/comments/options."""
    stripped = line.strip()
    if not stripped or stripped.startswith(("#", "-")):
        return None
    name = _REQUIREMENT_NAME_END.split(stripped, 1)[0].strip()
    return name or None


def parse_requirements(text: str) -> List[str]:
    packages: List[str] = []
    for line in text.splitlines():
        name = requirement_name(line)
        if name:
            packages.append(name)
    return packages


def parse_pyproject(text: str) -> ManifestDependencies:
    data = tomllib.loads(text)
    result = ManifestDependencies()

    project = data.get("project")
    if isinstance(project, dict):
        for dep in project.get("dependencies", []) or []:
            name = requirement_name(str(dep))
            if name:
                result.production.append(name)
        optional = project.get("optional-dependencies", {}) or {}
        for values in optional.values():
            for dep in values or []:
                name = requirement_name(str(dep))
                if name and name not in result.development:
                    result.development.append(name)

    tool = data.get("tool")
    poetry = tool.get("poetry", {}) if isinstance(tool, dict) else {}
    if isinstance(poetry, dict):
        for name in (poetry.get("dependencies", {}) or {}).keys():
            if name.lower() != "python" and name not in result.production:
                result.production.append(name)
        groups = poetry.get("group", {}) or {}
        for group in groups.values():
            if not isinstance(group, dict):
                continue
            for name in (group.get("dependencies", {}) or {}).keys():
                if name not in result.development:
                    result.development.append(name)
    return result


def detect_python_package_manager(names: Set[str]) -> str:
    if "Pipfile.lock" in names:
        return "pipenv"
    if "poetry.lock" in names:
        return "poetry"
    if "uv.lock" in names:
        return "uv"
    return "pip"


# Java


def parse_pom(text: str) -> ManifestDependencies:
    root = ET.fromstring(text)
    result = ManifestDependencies()

    namespace = _detect_xml_namespace(root)
    prefix = f"{{{namespace}}}" if namespace else ""

    for dep in root.iter(f"{prefix}dependency"):
        group = dep.findtext(f"{prefix}groupId", default="").strip()
        artifact = dep.findtext(f"{prefix}artifactId", default="").strip()
        if not group or not artifact:
            continue
        scope = dep.findtext(f"{prefix}scope", default="").strip().lower()
        target = result.development if scope == "test" else result.production
        target.append(f"{group}:{artifact}")
    return result


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None


_GRADLE_DEPENDENCY = re.compile(
    r"^\s*(\w+)\s*\(?\s*['\"]([\w\-.]+:[\w\-.]+)(?::[^'\"]*)?['\"]"
)


def parse_gradle(text: str) -> ManifestDependencies:
    result = ManifestDependencies()
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("//"):
            continue
        match = _GRADLE_DEPENDENCY.match(stripped)
        if not match:
            continue
        configuration, coordinate = match.group(1), match.group(2)
        if configuration.startswith("test"):
            result.development.append(coordinate)
        elif configuration in {"implementation", "api", "compile", "runtimeOnly"}:
            result.production.append(coordinate)
    return result


__all__ = [
    "ManifestDependencies",
    "detect_node_package_manager",
    "detect_python_package_manager",
    "load_package_json",
    "node_dependencies",
    "parse_gradle",
    "parse_pom",
    "parse_pyproject",
    "parse_requirements",
    "read_text",
    "requirement_name",
    "root_file_names",
]
