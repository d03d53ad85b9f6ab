"""Prompt construction for documentation generation."""

from .builder import DOCUMENTATION_OUTLINE, DocumentationPromptBuilder

__all__ = ["DOCUMENTATION_OUTLINE", "DocumentationPromptBuilder"]
