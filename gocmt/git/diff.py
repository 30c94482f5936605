"""Change-set discovery backed by ``git diff``."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Sequence

from ..discovery import filter_eligible
from ..errors import DiscoveryError
from ..logging import get_logger

GitRunner = Callable[..., str]


class ChangeSetDiscovery:
    """Lists Go files added, copied, modified or renamed relative to a ref or range."""

    def __init__(self, runner: GitRunner | None = None, *, cwd: Path | None = None) -> None:
        self._runner = runner or self._default_runner
        self.cwd = cwd or Path.cwd()
        self.logger = get_logger("git.diff")

    def changed_files(self, ref: str) -> List[str]:
        """Return paths changed by ``ref`` (``HEAD``, ``HEAD^`` or ``a...b``), relative to the repo root."""
        if not ref.strip():
            raise DiscoveryError("a commit reference is required")
        output = self._run(["git", "diff", "--name-only", "--diff-filter=ACMR", ref])
        files = [line.strip() for line in output.splitlines() if line.strip()]
        self.logger.info("Changed files of %s:\n%s", ref, "\n".join(files))
        return files

    def discover(self, ref: str, excludes: Sequence[str] = ()) -> List[Path]:
        """Return eligible changed Go files that still exist on disk."""
        changed = self.changed_files(ref)
        eligible = filter_eligible(changed, excludes)
        if not eligible:
            return []
        toplevel = Path(self._run(["git", "rev-parse", "--show-toplevel"]).strip())
        files: List[Path] = []
        for relative in eligible:
            path = toplevel / relative
            if not path.is_file():
                self.logger.debug("Skipping %s: no longer present in the working tree", relative)
                continue
            files.append(path)
        return files

    def _run(self, args: Iterable[str]) -> str:
        return self._runner(list(args), cwd=self.cwd)

    @staticmethod
    def _default_runner(args: Sequence[str], *, cwd: Path) -> str:
        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd),
                check=True,
                text=True,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise DiscoveryError("Unable to locate 'git'. Install git to use -c.") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip()
            raise DiscoveryError(f"failed to execute git command: {detail or exc.returncode}") from exc
        return completed.stdout


__all__ = ["ChangeSetDiscovery", "GitRunner"]
