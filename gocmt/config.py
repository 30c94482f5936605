"""Configuration loading for gocmt (.gocmt.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".gocmt.yml"


@dataclass
class LLMConfig:
    """Annotation service settings from .gocmt.yml."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None


@dataclass
class FormatterConfig:
    """gofmt invocation settings."""

    executable: Optional[str] = None


@dataclass
class GocmtConfig:
    """Represents the settings defined in .gocmt.yml."""

    root: Path
    concurrency: Optional[int] = None
    log_file: Optional[Path] = None
    exclude_paths: List[str] = field(default_factory=list)
    llm: LLMConfig = field(default_factory=LLMConfig)
    formatter: FormatterConfig = field(default_factory=FormatterConfig)


def load_config(config_path: Path) -> GocmtConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return GocmtConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )

    formatter_data = _as_dict(data.get("formatter"))
    formatter = FormatterConfig(executable=_as_str(formatter_data.get("executable")))

    concurrency = _as_int(data.get("concurrency"))
    if concurrency is not None and concurrency < 1:
        raise ConfigError("concurrency must be a positive integer")

    log_file_str = _as_str(data.get("log_file"))
    log_file = root / log_file_str if log_file_str else None

    return GocmtConfig(
        root=root,
        concurrency=concurrency,
        log_file=log_file,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        llm=llm,
        formatter=formatter,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


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


__all__ = ["CONFIG_FILENAME", "FormatterConfig", "GocmtConfig", "LLMConfig", "load_config"]
