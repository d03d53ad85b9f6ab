"""Configuration loading for docweave (.docweave.yml plus environment overrides)."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".docweave.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


def _default_scratch_root() -> Path:
    return Path(tempfile.gettempdir()) / "docweave"


@dataclass
class AnalysisConfig:
    """Clone and walk limits for the analysis pipeline."""

    scratch_root: Path = field(default_factory=_default_scratch_root)
    clone_timeout: float = 120.0
    max_depth: int = 6
    enabled_extractors: List[str] = field(default_factory=list)


@dataclass
class LLMConfig:
    """Chat-completion endpoint settings."""

    model: str = "openai/gpt-oss-120b"
    base_url: str = "https://integrate.api.nvidia.com/v1"
    api_key: Optional[str] = None
    temperature: Optional[float] = 0.1
    top_p: Optional[float] = 1.0
    max_tokens: Optional[int] = 40960
    request_timeout: Optional[float] = 120.0


@dataclass
class StorageConfig:
    """Where repository records and generated markdown live."""

    backend: str = "file"
    data_dir: Path = field(default_factory=lambda: Path("data"))


@dataclass
class ServiceConfig:
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class DocweaveConfig:
    """Represents the settings defined in .docweave.yml."""

    root: Path
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)


_ENV_API_KEY_KEYS = ("DOCWEAVE_LLM_API_KEY", "LLM_API_KEY", "OPENAI_API_KEY")


def load_config(
    config_path: Path, *, environ: Mapping[str, str] | None = None
) -> DocweaveConfig:
    """Load configuration from disk and apply environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    env = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    config = DocweaveConfig(root=root)

    analysis_data = _as_dict(data.get("analysis"))
    if analysis_data:
        scratch_root = _as_str(analysis_data.get("scratch_root"))
        if scratch_root:
            config.analysis.scratch_root = _resolve_path(root, scratch_root)
        timeout = _as_float(analysis_data.get("clone_timeout"))
        if timeout is not None and timeout > 0:
            config.analysis.clone_timeout = timeout
        depth = _as_int(analysis_data.get("max_depth"))
        if depth is not None and depth > 0:
            config.analysis.max_depth = depth
        extractor_data = _as_dict(analysis_data.get("extractors"))
        config.analysis.enabled_extractors = _as_str_list(extractor_data.get("enabled"))

    llm_data = _as_dict(data.get("llm"))
    if llm_data:
        llm = config.llm
        llm.model = _as_str(llm_data.get("model")) or llm.model
        llm.base_url = _as_str(llm_data.get("base_url")) or llm.base_url
        llm.api_key = _as_str(llm_data.get("api_key")) or llm.api_key
        if "temperature" in llm_data:
            llm.temperature = _as_float(llm_data.get("temperature"))
        if "top_p" in llm_data:
            llm.top_p = _as_float(llm_data.get("top_p"))
        if "max_tokens" in llm_data:
            llm.max_tokens = _as_int(llm_data.get("max_tokens"))
        if "request_timeout" in llm_data:
            llm.request_timeout = _as_float(llm_data.get("request_timeout"))

    storage_data = _as_dict(data.get("storage"))
    if storage_data:
        backend = (_as_str(storage_data.get("backend")) or "file").lower()
        if backend not in {"file", "memory"}:
            raise ConfigError(f"Unsupported storage backend '{backend}'")
        config.storage.backend = backend
        data_dir = _as_str(storage_data.get("data_dir"))
        if data_dir:
            config.storage.data_dir = _resolve_path(root, data_dir)

    service_data = _as_dict(data.get("service"))
    if service_data:
        config.service.host = _as_str(service_data.get("host")) or config.service.host
        port = _as_int(service_data.get("port"))
        if port is not None:
            config.service.port = port

    _apply_env_overrides(config, env)
    return config


def _apply_env_overrides(config: DocweaveConfig, env: Mapping[str, str]) -> None:
    scratch_root = env.get("DOCWEAVE_SCRATCH_ROOT")
    if scratch_root:
        config.analysis.scratch_root = Path(scratch_root).expanduser()
    timeout = _as_float(env.get("DOCWEAVE_CLONE_TIMEOUT"))
    if timeout is not None and timeout > 0:
        config.analysis.clone_timeout = timeout
    depth = _as_int(env.get("DOCWEAVE_MAX_DEPTH"))
    if depth is not None and depth > 0:
        config.analysis.max_depth = depth

    model = env.get("DOCWEAVE_LLM_MODEL")
    if model:
        config.llm.model = model
    base_url = env.get("DOCWEAVE_LLM_BASE_URL")
    if base_url:
        config.llm.base_url = base_url
    if not config.llm.api_key:
        for key in _ENV_API_KEY_KEYS:
            value = env.get(key)
            if value:
                config.llm.api_key = value
                break

    data_dir = env.get("DOCWEAVE_DATA_DIR")
    if data_dir:
        config.storage.data_dir = Path(data_dir).expanduser()
    backend = env.get("DOCWEAVE_STORAGE_BACKEND")
    if backend:
        if backend.lower() not in {"file", "memory"}:
            raise ConfigError(f"Unsupported storage backend '{backend}'")
        config.storage.backend = backend.lower()


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_path(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "AnalysisConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DocweaveConfig",
    "LLMConfig",
    "ServiceConfig",
    "StorageConfig",
    "load_config",
]
