"""Remote LLM runner adapters."""

from .runner import LLMError, LLMRequest, LLMRunner

__all__ = ["LLMError", "LLMRequest", "LLMRunner"]
