"""Adapter around an OpenAI-compatible chat-completions endpoint."""

from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..config import LLMConfig
from ..logging import get_logger

_AUTO_API_KEY = object()


class LLMError(RuntimeError):
    """Raised when the completion endpoint cannot produce text."""


@dataclass
class LLMRequest:
    """Represents one chat-completion request."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    top_p: Optional[float]
    max_tokens: Optional[int]
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]


class LLMRunner:
    """Executes prompts against the configured remote model."""

    DEFAULT_MODEL = LLMConfig.model
    DEFAULT_BASE_URL = LLMConfig.base_url
    ENV_API_KEY_KEYS = ("DOCWEAVE_LLM_API_KEY", "LLM_API_KEY", "OPENAI_API_KEY")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        temperature: Optional[float] = 0.1,
        top_p: Optional[float] = 1.0,
        max_tokens: Optional[int] = 40960,
        api_key: str | None | object = _AUTO_API_KEY,
        request_timeout: Optional[float] = 120.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.temperature = temperature
        self.top_p = top_p
        self.max_tokens = max_tokens
        self.api_key = self._resolve_api_key(api_key)
        self.request_timeout = request_timeout
        self._runner = runner or self._post_completion
        self.logger = get_logger("llm.runner")

    @classmethod
    def from_config(cls, config: LLMConfig, *, api_key: str | None = None, **kwargs) -> "LLMRunner":
        """Build a runner from config; an explicit ``api_key`` wins over the configured one."""
        return cls(
            config.model,
            base_url=config.base_url,
            temperature=config.temperature,
            top_p=config.top_p,
            max_tokens=config.max_tokens,
            api_key=api_key or config.api_key,
            request_timeout=config.request_timeout,
            **kwargs,
        )

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Send the prompt to the configured model and return the response text."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            top_p=self.top_p,
            max_tokens=self.max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        return self._runner(request)

    def _post_completion(self, request: LLMRequest) -> str:
        endpoint = f"{request.base_url}/chat/completions"
        timeout = request.request_timeout or 120.0
        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"
        body = json.dumps(completion_payload(request)).encode("utf-8")

        self.logger.debug(
            "POST %s (model %s, %d prompt chars)", endpoint, request.model, len(request.prompt)
        )
        started = time.monotonic()
        try:
            http_request = Request(endpoint, data=body, headers=headers, method="POST")
            with urlopen(http_request, timeout=timeout) as response:
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore").strip() if exc.fp else ""
            raise LLMError(f"LLM API error {exc.code}: {detail or exc.reason}") from exc
        except URLError as exc:
            raise LLMError(f"LLM API request failed: {exc.reason}") from exc
        except TimeoutError as exc:
            raise LLMError(f"LLM API request timed out after {timeout:g}s") from exc
        self.logger.debug("Completion received in %.1fs", time.monotonic() - started)

        try:
            decoded = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise LLMError("LLM API returned invalid JSON") from exc
        content = completion_text(decoded)
        if not content.strip():
            raise LLMError("LLM API returned an empty response")
        return content.strip()

    def _resolve_api_key(self, api_key: str | None | object) -> str | None:
        if api_key is not _AUTO_API_KEY:
            return api_key  # type: ignore[return-value]
        for key in self.ENV_API_KEY_KEYS:
            value = os.getenv(key)
            if value:
                return value
        return None


def completion_payload(request: LLMRequest) -> Dict[str, Any]:
    """Return the chat-completions body; unset sampling options are omitted."""
    messages = [{"role": "user", "content": request.prompt}]
    if request.system:
        messages.insert(0, {"role": "system", "content": request.system})
    payload: Dict[str, Any] = {"model": request.model, "messages": messages, "stream": False}
    options = {
        "temperature": request.temperature,
        "top_p": request.top_p,
        "max_tokens": request.max_tokens,
    }
    payload.update({key: value for key, value in options.items() if value is not None})
    return payload


def completion_text(payload: Any) -> str:
    """First choice's message content (or legacy ``text``); empty when absent."""
    try:
        choice = payload["choices"][0]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(choice, dict):
        return ""
    message = choice.get("message")
    content = message.get("content") if isinstance(message, dict) else choice.get("text")
    return content if isinstance(content, str) else ""


__all__ = ["LLMError", "LLMRequest", "LLMRunner", "completion_payload", "completion_text"]
