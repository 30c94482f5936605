"""gofmt adapter producing canonical Go source."""

from __future__ import annotations

import subprocess
from typing import Callable, Sequence

from ..errors import FormatterUnavailableError, ParseError

FormatRunner = Callable[[Sequence[str], str], str]


class GoFormatter:
    """Canonicalizes Go source by piping it through gofmt."""

    DEFAULT_EXECUTABLE = "gofmt"

    def __init__(
        self,
        executable: str | None = None,
        *,
        runner: FormatRunner | None = None,
    ) -> None:
        self.executable = executable or self.DEFAULT_EXECUTABLE
        self._runner = runner or self._default_runner

    def format(self, source: str) -> str:
        """Return the canonical form of ``source``; raises ParseError on invalid syntax."""
        return self._runner([self.executable], source)

    __call__ = format

    @staticmethod
    def _default_runner(args: Sequence[str], source: str) -> str:
        try:
            completed = subprocess.run(
                list(args),
                input=source.encode("utf-8"),
                check=True,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise FormatterUnavailableError(
                f"Unable to locate '{args[0]}'. Install Go or configure formatter.executable."
            ) from exc
        except subprocess.CalledProcessError as exc:
            detail = exc.stderr.decode("utf-8", errors="replace").strip()
            raise ParseError(f"failed to format Go code: {detail or exc.returncode}") from exc
        return completed.stdout.decode("utf-8")


__all__ = ["FormatRunner", "GoFormatter"]
