"""Error taxonomy for gocmt runs."""

from __future__ import annotations


class GocmtError(RuntimeError):
    """Base class for failures raised by gocmt components."""

    stage = "unknown"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ConfigError(GocmtError):
    """Raised when the configuration file cannot be parsed."""

    stage = "config"


class DiscoveryError(GocmtError):
    """Raised when the set of target files cannot be determined. Fatal for the run."""

    stage = "discovery"


class ReadError(GocmtError):
    stage = "reading"


class ParseError(GocmtError):
    """Raised when Go source is not syntactically valid."""

    stage = "parsing"


class FormatterUnavailableError(ParseError):
    """Raised when the gofmt executable cannot be located."""

    stage = "formatting"


class BoilerplateNotFoundError(GocmtError):
    """Raised when no package/import prologue can be stripped. Recoverable."""

    stage = "eliding"


class AnnotationServiceError(GocmtError):
    stage = "awaiting_annotation"


class ResponseFormatError(GocmtError):
    """Raised when the annotation reply is not the expected JSON shape."""

    stage = "awaiting_annotation"


class MergeSerializationError(GocmtError):
    stage = "merging"


class WriteError(GocmtError):
    stage = "writing"


__all__ = [
    "AnnotationServiceError",
    "BoilerplateNotFoundError",
    "ConfigError",
    "DiscoveryError",
    "FormatterUnavailableError",
    "GocmtError",
    "MergeSerializationError",
    "ParseError",
    "ReadError",
    "ResponseFormatError",
    "WriteError",
]
