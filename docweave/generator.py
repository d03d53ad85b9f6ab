"""Turns analysis results into markdown via the LLM, with a template fallback."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable, Optional

from .llm.runner import LLMRunner
from .logging import get_logger
from .models import AnalysisResult
from .prompting.builder import DocumentationPromptBuilder


@dataclass(frozen=True)
class GeneratedDocumentation:
    """Markdown output plus whether the template fallback produced it."""

    markdown: str
    used_fallback: bool = False
    error: Optional[str] = None


class DocumentationGenerator:
    """Requests documentation for an analysis; never raises on LLM failure."""

    def __init__(
        self,
        runner: LLMRunner | None = None,
        prompt_builder: DocumentationPromptBuilder | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.runner = runner or LLMRunner()
        self.prompt_builder = prompt_builder or DocumentationPromptBuilder()
        self._clock = clock or (lambda: datetime.now(UTC))
        self.logger = get_logger("generator")

    def generate(self, analysis: AnalysisResult) -> GeneratedDocumentation:
        name = analysis.repository.name
        if not self.runner.api_key:
            self.logger.warning("No LLM API key configured; using template for %s", name)
            return self._fallback(analysis, "No LLM API key configured")

        prompt = self.prompt_builder.build_prompt(analysis)
        self.logger.debug("Prompt for %s is %d characters", name, len(prompt))
        try:
            markdown = self.runner.run(prompt)
        except Exception as exc:
            self.logger.warning("LLM generation failed for %s: %s", name, exc)
            return self._fallback(analysis, str(exc))

        if not markdown.strip():
            self.logger.warning("LLM returned no content for %s", name)
            return self._fallback(analysis, "LLM returned an empty response")
        self.logger.info("Generated documentation for %s (%d characters)", name, len(markdown))
        return GeneratedDocumentation(markdown=markdown)

    def _fallback(self, analysis: AnalysisResult, reason: str) -> GeneratedDocumentation:
        generated_at = self._clock().isoformat().replace("+00:00", "Z")
        markdown = self.prompt_builder.build_fallback(analysis, generated_at=generated_at)
        return GeneratedDocumentation(markdown=markdown, used_fallback=True, error=reason)


__all__ = ["DocumentationGenerator", "GeneratedDocumentation"]
