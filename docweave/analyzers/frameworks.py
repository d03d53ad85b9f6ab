"""Framework detection from root manifests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

from .base import Extractor
from .utils import load_package_json, node_dependencies, read_text
from ..logging import get_logger
from ..models import FileDescriptor

NODE_FRAMEWORKS: Dict[str, str] = {
    "next": "Next.js",
    "react": "React",
    "vue": "Vue.js",
    "@angular/core": "Angular",
    "express": "Express.js",
    "svelte": "Svelte",
    "nuxt": "Nuxt.js",
    "@nestjs/core": "NestJS",
    "fastify": "Fastify",
    "gatsby": "Gatsby",
}

PYTHON_FRAMEWORKS: Dict[str, str] = {
    "django": "Django",
    "flask": "Flask",
    "fastapi": "FastAPI",
    "tornado": "Tornado",
    "pyramid": "Pyramid",
    "streamlit": "Streamlit",
}

JAVA_FRAMEWORKS: Dict[str, str] = {
    "spring-boot": "Spring Boot",
    "quarkus": "Quarkus",
    "micronaut": "Micronaut",
}


class FrameworkExtractor(Extractor):
    """Matches manifest contents against known framework signatures.

    Each manifest type is checked independently: a manifest that fails to
    parse contributes nothing and is logged, the others still count.
    """

    name = "frameworks"

    def __init__(self) -> None:
        self.logger = get_logger("analyzers.frameworks")

    def empty(self) -> Tuple[str, ...]:
        return ()

    def extract(self, files: Sequence[FileDescriptor], root: Path) -> Tuple[str, ...]:
        frameworks: List[str] = []
        detectors: Sequence[Tuple[str, Callable[[Path], List[str]]]] = (
            ("package.json", self._node_frameworks),
            ("Python manifests", self._python_frameworks),
            ("Java build files", self._java_frameworks),
        )
        for label, detector in detectors:
            try:
                detected = detector(root)
            except Exception as exc:
                self.logger.warning("Framework detection skipped %s: %s", label, exc)
                continue
            for framework in detected:
                if framework not in frameworks:
                    frameworks.append(framework)
        return tuple(frameworks)

    @staticmethod
    def _node_frameworks(root: Path) -> List[str]:
        package_json = load_package_json(root)
        if package_json is None:
            return []
        deps = node_dependencies(package_json)
        names = {name.lower() for name in deps.production + deps.development}
        return [label for key, label in NODE_FRAMEWORKS.items() if key in names]

    @staticmethod
    def _python_frameworks(root: Path) -> List[str]:
        text = ""
        for manifest in ("requirements.txt", "pyproject.toml"):
            content = read_text(root, manifest)
            if content:
                text += content.lower() + "\n"
        return [label for key, label in PYTHON_FRAMEWORKS.items() if key in text]

    @staticmethod
    def _java_frameworks(root: Path) -> List[str]:
        text = ""
        for manifest in ("pom.xml", "build.gradle", "build.gradle.kts"):
            content = read_text(root, manifest)
            if content:
                text += content.lower() + "\n"
        return [label for key, label in JAVA_FRAMEWORKS.items() if key in text]
