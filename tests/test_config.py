"""Tests for gocmt.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from gocmt.config import GocmtConfig, LLMConfig, load_config
from gocmt.errors import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, GocmtConfig)
    assert config.root == tmp_path.resolve()
    assert config.concurrency is None
    assert config.log_file is None
    assert config.exclude_paths == []
    assert config.llm == LLMConfig()
    assert config.formatter.executable is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".gocmt.yml"
    config_file.write_text(
        """
concurrency: 4
log_file: logs/gocmt.log
exclude_paths:
  - "gen/"
  - "*.pb.go"
llm:
  model: "moonshot-v1-32k"
  base_url: "https://proxy.example.test/v1"
  temperature: 0.1
  max_tokens: 2048
  request_timeout: 90
formatter:
  executable: /usr/local/go/bin/gofmt
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.concurrency == 4
    assert config.log_file == tmp_path.resolve() / "logs" / "gocmt.log"
    assert config.exclude_paths == ["gen/", "*.pb.go"]
    assert config.llm.model == "moonshot-v1-32k"
    assert config.llm.base_url == "https://proxy.example.test/v1"
    assert config.llm.temperature == pytest.approx(0.1)
    assert config.llm.max_tokens == 2048
    assert config.llm.request_timeout == pytest.approx(90.0)
    assert config.formatter.executable == "/usr/local/go/bin/gofmt"


def test_load_config_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    (tmp_path / ".gocmt.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).concurrency is None


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "llm: [unclosed\n",
        "concurrency: 0\n",
    ],
)
def test_load_config_rejects_invalid_content(tmp_path: Path, content: str) -> None:
    (tmp_path / ".gocmt.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
