"""Builds LLM prompts and fallback markdown from analysis results."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from jinja2 import Environment, FileSystemLoader

from ..models import AnalysisResult

# Sections the model is asked to produce, in order.
DOCUMENTATION_OUTLINE: Tuple[Tuple[str, str], ...] = (
    (
        "Service Overview",
        "Infer the service purpose from the actual code structure, dependencies, and README content",
    ),
    (
        "Architecture",
        "Describe the architecture based on the real project structure and frameworks detected",
    ),
    (
        "Technology Stack",
        "Detail the actual languages, frameworks, and key dependencies found",
    ),
    (
        "Setup & Installation",
        "Provide setup instructions based on the detected package manager and dependencies",
    ),
    (
        "Configuration",
        "Document the configuration files and environment setup based on actual files found",
    ),
    (
        "API Documentation",
        "If API specs were found, document them; otherwise infer API structure from the codebase",
    ),
    (
        "Development Workflow",
        "Based on test files and build configuration found",
    ),
    (
        "File Structure Guide",
        "Explain the actual directory structure and key files",
    ),
)

KEY_DEPENDENCY_LIMIT = 10


class DocumentationPromptBuilder:
    """Renders analysis facets into the generation prompt and the fallback document."""

    PROMPT_TEMPLATE = "prompt.md.j2"
    FALLBACK_TEMPLATE = "fallback.md.j2"

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = self._create_env(self.templates_dir)

    def build_prompt(self, analysis: AnalysisResult) -> str:
        template = self._env.get_template(self.PROMPT_TEMPLATE)
        return template.render(**self._context(analysis)).strip() + "\n"

    def build_fallback(self, analysis: AnalysisResult, *, generated_at: str) -> str:
        """Render deterministic markdown using only analysis data."""
        template = self._env.get_template(self.FALLBACK_TEMPLATE)
        context = self._context(analysis)
        context["generated_at"] = generated_at
        return template.render(**context).strip() + "\n"

    @staticmethod
    def _context(analysis: AnalysisResult) -> Dict[str, object]:
        language_summary = ", ".join(
            f"{item.language} ({item.file_count} files)" for item in analysis.languages
        )
        language_list = ", ".join(item.language for item in analysis.languages)
        return {
            "analysis": analysis,
            "language_summary": language_summary,
            "language_list": language_list,
            "key_dependencies": list(analysis.dependencies.production[:KEY_DEPENDENCY_LIMIT]),
            "outline": DOCUMENTATION_OUTLINE,
        }

    @staticmethod
    def _create_env(templates_dir: Path) -> Environment:
        directories: List[str] = [str(templates_dir)]
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


__all__ = ["DOCUMENTATION_OUTLINE", "DocumentationPromptBuilder"]
