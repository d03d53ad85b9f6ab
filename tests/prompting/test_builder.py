"""Tests for the documentation prompt builder."""

from __future__ import annotations

from pathlib import Path

from docweave.models import (
    AnalysisResult,
    ApiSpec,
    CodeMetrics,
    DependencyInfo,
    LanguageCount,
    ReadmeInfo,
    RepositoryInfo,
)
from docweave.prompting.builder import DOCUMENTATION_OUTLINE, DocumentationPromptBuilder


def _empty_analysis() -> AnalysisResult:
    return AnalysisResult(
        repository=RepositoryInfo(name="empty", analyzed_at="2024-05-01T10:00:00Z", total_files=0),
        structure="",
    )


def _shop_analysis() -> AnalysisResult:
    return AnalysisResult(
        repository=RepositoryInfo(name="shop", analyzed_at="2024-05-01T10:00:00Z", total_files=4),
        structure="shop/\n├── src/\n└── package.json",
        languages=(LanguageCount("JavaScript", 2), LanguageCount("TypeScript", 1)),
        frameworks=("React", "Express.js"),
        dependencies=DependencyInfo(
            production=tuple(f"pkg{index}" for index in range(12)),
            development=("jest",),
            total=13,
            package_manager="yarn",
        ),
        readme=ReadmeInfo(filename="README.md", content="# Shop\nSells things.", full_length=20, truncated=False),
        entry_points=("src/index.js",),
        config_files=("package.json",),
        test_files=("src/app.test.js",),
        api_specs=(ApiSpec(file="openapi.yaml", type="OpenAPI/Swagger", size=120, preview="openapi: 3.1.0"),),
        metrics=CodeMetrics(total_files=4, code_files=3, estimated_lines_of_code=90, average_file_size=40),
    )


def test_prompt_renders_placeholders_for_empty_analysis() -> None:
    prompt = DocumentationPromptBuilder().build_prompt(_empty_analysis())

    assert "- **Repository**: empty" in prompt
    assert "- **Languages**: Unknown" in prompt
    assert "- **Frameworks**: None detected" in prompt
    assert "None found" in prompt
    assert "No clear entry points found" in prompt
    assert "No config files found" in prompt
    assert "No API specifications found" in prompt
    assert "No test files detected" in prompt
    assert "No README file found" in prompt
    assert "Structure not available" in prompt


def test_prompt_renders_facets() -> None:
    prompt = DocumentationPromptBuilder().build_prompt(_shop_analysis())

    assert "- **Languages**: JavaScript (2 files), TypeScript (1 files)" in prompt
    assert "- **Frameworks**: React, Express.js" in prompt
    assert "- **Package Manager**: yarn" in prompt
    assert "- **Estimated Lines of Code**: 90" in prompt
    assert "- **OpenAPI/Swagger**: openapi.yaml (120 bytes)" in prompt
    assert "**Length**: 20 characters" in prompt
    assert "Sells things." in prompt
    assert "- pkg9" in prompt
    assert "- pkg10" not in prompt
    assert "No README file found" not in prompt


def test_prompt_lists_outline_in_order() -> None:
    prompt = DocumentationPromptBuilder().build_prompt(_shop_analysis())

    positions = [prompt.index(f"**{title}**") for title, _ in DOCUMENTATION_OUTLINE]
    assert positions == sorted(positions)
    assert "1. **Service Overview**" in prompt
    assert "8. **File Structure Guide**" in prompt


def test_fallback_uses_only_analysis_data() -> None:
    markdown = DocumentationPromptBuilder().build_fallback(
        _shop_analysis(), generated_at="2024-05-01T10:01:00Z"
    )

    assert markdown.startswith("# shop Documentation")
    assert "This repository contains a JavaScript, TypeScript project using React, Express.js." in markdown
    assert "- **JavaScript**: 2 files" in markdown
    assert "- `src/index.js`" in markdown
    assert "- **OpenAPI/Swagger**: `openapi.yaml`" in markdown
    assert "Test files found: 1" in markdown
    assert "*Generated on: 2024-05-01T10:01:00Z*" in markdown
    assert "API call failed, so this is a basic template." in markdown


def test_fallback_for_empty_analysis() -> None:
    markdown = DocumentationPromptBuilder().build_fallback(
        _empty_analysis(), generated_at="2024-05-01T10:01:00Z"
    )

    assert "No languages detected" in markdown
    assert "No dependencies found" in markdown
    assert "No clear entry points identified" in markdown
    assert "No configuration files found" in markdown
    assert "## API Documentation" not in markdown
    assert "## README Content" not in markdown


def test_custom_templates_override_defaults(tmp_path: Path) -> None:
    (tmp_path / "prompt.md.j2").write_text("Describe {{ analysis.repository.name }}.\n", encoding="utf-8")

    builder = DocumentationPromptBuilder(templates_dir=tmp_path)

    assert builder.build_prompt(_shop_analysis()) == "Describe shop.\n"
    fallback = builder.build_fallback(_shop_analysis(), generated_at="now")
    assert fallback.startswith("# shop Documentation")
