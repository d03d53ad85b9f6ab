"""Tests for docweave.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docweave.config import ConfigError, DocweaveConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert isinstance(config, DocweaveConfig)
    assert config.root == tmp_path.resolve()
    assert config.analysis.clone_timeout == 120.0
    assert config.analysis.max_depth == 6
    assert config.analysis.enabled_extractors == []
    assert config.llm.model == "openai/gpt-oss-120b"
    assert config.llm.base_url == "https://integrate.api.nvidia.com/v1"
    assert config.llm.api_key is None
    assert config.llm.max_tokens == 40960
    assert config.storage.backend == "file"
    assert config.service.port == 8000


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".docweave.yml"
    config_file.write_text(
        """
analysis:
  scratch_root: "scratch"
  clone_timeout: 30
  max_depth: 4
  extractors:
    enabled: [languages, dependencies]
llm:
  model: "meta/llama-3.1-70b-instruct"
  base_url: "http://localhost:8080/v1"
  api_key: "file-key"
  temperature: 0.3
  top_p: 0.9
  max_tokens: 2048
  request_timeout: 60
storage:
  backend: memory
  data_dir: "var/data"
service:
  host: "127.0.0.1"
  port: 9100
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path, environ={})

    root = tmp_path.resolve()
    assert config.analysis.scratch_root == root / "scratch"
    assert config.analysis.clone_timeout == 30.0
    assert config.analysis.max_depth == 4
    assert config.analysis.enabled_extractors == ["languages", "dependencies"]
    assert config.llm.model == "meta/llama-3.1-70b-instruct"
    assert config.llm.base_url == "http://localhost:8080/v1"
    assert config.llm.api_key == "file-key"
    assert config.llm.temperature == 0.3
    assert config.llm.top_p == 0.9
    assert config.llm.max_tokens == 2048
    assert config.llm.request_timeout == 60.0
    assert config.storage.backend == "memory"
    assert config.storage.data_dir == root / "var" / "data"
    assert config.service.host == "127.0.0.1"
    assert config.service.port == 9100


def test_load_config_accepts_explicit_file_path(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("service:\n  port: 7000\n", encoding="utf-8")

    config = load_config(config_file, environ={})

    assert config.service.port == 7000


def test_load_config_ignores_invalid_limits(tmp_path: Path) -> None:
    (tmp_path / ".docweave.yml").write_text(
        "analysis:\n  clone_timeout: -5\n  max_depth: zero\n", encoding="utf-8"
    )

    config = load_config(tmp_path, environ={})

    assert config.analysis.clone_timeout == 120.0
    assert config.analysis.max_depth == 6


def test_environment_overrides_file(tmp_path: Path) -> None:
    (tmp_path / ".docweave.yml").write_text("llm:\n  model: from-file\n", encoding="utf-8")

    config = load_config(
        tmp_path,
        environ={
            "DOCWEAVE_LLM_MODEL": "from-env",
            "DOCWEAVE_CLONE_TIMEOUT": "45",
            "DOCWEAVE_MAX_DEPTH": "3",
            "DOCWEAVE_SCRATCH_ROOT": str(tmp_path / "tmp"),
            "DOCWEAVE_STORAGE_BACKEND": "MEMORY",
            "OPENAI_API_KEY": "openai-key",
        },
    )

    assert config.llm.model == "from-env"
    assert config.analysis.clone_timeout == 45.0
    assert config.analysis.max_depth == 3
    assert config.analysis.scratch_root == tmp_path / "tmp"
    assert config.storage.backend == "memory"
    assert config.llm.api_key == "openai-key"


def test_configured_api_key_wins_over_environment(tmp_path: Path) -> None:
    (tmp_path / ".docweave.yml").write_text("llm:\n  api_key: file-key\n", encoding="utf-8")

    config = load_config(tmp_path, environ={"DOCWEAVE_LLM_API_KEY": "env-key"})

    assert config.llm.api_key == "file-key"


@pytest.mark.parametrize(
    "content",
    [
        "llm: [unclosed\n",
        "- just\n- a list\n",
        "storage:\n  backend: redis\n",
    ],
)
def test_load_config_rejects_invalid_files(tmp_path: Path, content: str) -> None:
    (tmp_path / ".docweave.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".docweave.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path, environ={}).storage.backend == "file"
