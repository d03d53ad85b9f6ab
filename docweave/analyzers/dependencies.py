"""Dependency extraction from the root manifest."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from .base import Extractor
from .utils import (
    ManifestDependencies,
    detect_node_package_manager,
    detect_python_package_manager,
    load_package_json,
    node_dependencies,
    parse_gradle,
    parse_pom,
    parse_pyproject,
    parse_requirements,
    read_text,
    root_file_names,
)
from ..models import DependencyInfo, FileDescriptor

_PYTHON_DEV_REQUIREMENTS = ("requirements-dev.txt", "dev-requirements.txt")


class DependencyExtractor(Extractor):
    """Reads the first root manifest found and reports its declared packages.

    Malformed manifests raise; the orchestrator degrades the facet.
    """

    name = "dependencies"

    def empty(self) -> DependencyInfo:
        return DependencyInfo()

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> DependencyInfo:
        names = root_file_names(files)

        if "package.json" in names:
            package_json = load_package_json(root)
            if package_json is not None:
                return _info(node_dependencies(package_json), detect_node_package_manager(names))

        if "requirements.txt" in names:
            deps = ManifestDependencies(
                production=parse_requirements(read_text(root, "requirements.txt") or "")
            )
            for dev_file in _PYTHON_DEV_REQUIREMENTS:
                if dev_file in names:
                    deps.development.extend(parse_requirements(read_text(root, dev_file) or ""))
            return _info(deps, detect_python_package_manager(names))

        if "pyproject.toml" in names:
            deps = parse_pyproject(read_text(root, "pyproject.toml") or "")
            return _info(deps, detect_python_package_manager(names))

        if "pom.xml" in names:
            return _info(parse_pom(read_text(root, "pom.xml") or ""), "maven")

        for gradle_file in ("build.gradle", "build.gradle.kts"):
            if gradle_file in names:
                return _info(parse_gradle(read_text(root, gradle_file) or ""), "gradle")

        return self.empty()


def _info(deps: ManifestDependencies, package_manager: str) -> DependencyInfo:
    return DependencyInfo(
        production=tuple(deps.production),
        development=tuple(deps.development),
        total=len(deps.production) + len(deps.development),
        package_manager=package_manager,
    )
