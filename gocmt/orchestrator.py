"""Pipeline orchestration: discovery, per-file annotation and progress aggregation."""

from __future__ import annotations

import os
import queue
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .config import GocmtConfig
from .discovery import discover_paths
from .errors import GocmtError, ReadError, WriteError
from .git.diff import ChangeSetDiscovery
from .golang.elider import prepare_request_source
from .golang.formatter import GoFormatter
from .golang.merger import merge_comments
from .golang.structure import parse_source
from .logging import get_logger
from .models import FileOutcome, FileState, ProgressState, RunSummary, SourceFile
from .prompting.annotation import AnnotationPrompt, parse_response

Annotator = Callable[[str], str]
Formatter = Callable[[str], str]
StartCallback = Callable[[Path], None]
ProgressCallback = Callable[[ProgressState, FileOutcome], None]


class Pipeline:
    """Runs read → format → elide → annotate → merge → format → write for each file."""

    def __init__(
        self,
        annotator: Annotator,
        *,
        formatter: Formatter | None = None,
        prompt: AnnotationPrompt | None = None,
        concurrency: int = 1,
        on_start: StartCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.annotator = annotator
        self.formatter = formatter or GoFormatter()
        self.prompt = prompt or AnnotationPrompt()
        self.concurrency = concurrency
        self._on_start = on_start
        self._on_progress = on_progress
        self.logger = get_logger("orchestrator")

    def process_file(self, path: Path) -> FileOutcome:
        """Annotate one file in place. Errors leave the file untouched and yield a FAILED outcome."""
        state = FileState.PENDING
        try:
            state = FileState.READING
            source = self._read(path)

            state = FileState.FORMATTING
            source.text = self.formatter(source.text)
            self.logger.debug("Go code before process (%s):\n%s", path, source.text)

            state = FileState.PARSING
            model = parse_source(source.text)

            state = FileState.ELIDING
            request_source = prepare_request_source(model, self.formatter)
            self.logger.debug("Go code after process (%s):\n%s", path, request_source)

            state = FileState.AWAITING_ANNOTATION
            reply = self.annotator(self.prompt.render(request_source))
            self.logger.debug("ChatCompletion result (%s):\n%s", path, reply)
            entries = parse_response(reply)

            state = FileState.MERGING
            merged = merge_comments(model, entries)

            state = FileState.REFORMATTING
            result = self.formatter(merged.text)

            state = FileState.WRITING
            payload = result.encode("utf-8")
            if payload != source.raw:
                self._write(path, payload)
            else:
                self.logger.info("No changes for %s; skipping write", path)
        except GocmtError as exc:
            self.logger.info("Failed while %s %s: %s", state.value, path, exc)
            return FileOutcome(path=path, state=FileState.FAILED, stage=state.value, error=str(exc))

        self.logger.info("Processed %s: %d comment(s) added", path, merged.added)
        return FileOutcome(path=path, state=FileState.DONE, comments_added=merged.added)

    def run(self, files: Iterable[Path]) -> RunSummary:
        """Process ``files`` on a bounded worker pool and wait until every file is accounted for."""
        paths = list(files)
        total = len(paths)
        if total == 0:
            self.logger.info("No files to process")
            return RunSummary(total=0, nothing_to_do=True)

        events: "queue.Queue[FileOutcome]" = queue.Queue()
        progress = ProgressState(total=total)
        outcomes: List[FileOutcome] = []

        def aggregate() -> None:
            while not progress.finished:
                outcome = events.get()
                progress.advance()
                outcomes.append(outcome)
                self._notify_progress(progress, outcome)

        aggregator = threading.Thread(target=aggregate, name="gocmt-progress", daemon=True)
        aggregator.start()

        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="gocmt-worker") as pool:
            for path in paths:
                pool.submit(self._work, path, events)

        aggregator.join()
        self.logger.info("All files processed (%d/%d)", progress.completed, total)
        return RunSummary(total=total, outcomes=tuple(outcomes))

    def _work(self, path: Path, events: "queue.Queue[FileOutcome]") -> None:
        try:
            self.logger.info("Processing file: %s", path)
            if self._on_start is not None:
                self._on_start(path)
            outcome = self.process_file(path)
        except Exception as exc:
            self.logger.exception("Unexpected failure while processing %s", path)
            outcome = FileOutcome(path=path, state=FileState.FAILED, stage="unknown", error=str(exc))
        events.put(outcome)

    def _notify_progress(self, progress: ProgressState, outcome: FileOutcome) -> None:
        if self._on_progress is None:
            return
        try:
            self._on_progress(progress, outcome)
        except Exception:
            self.logger.exception("Progress callback failed")

    @staticmethod
    def _read(path: Path) -> SourceFile:
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise ReadError(f"failed to read {path}: {exc}") from exc
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ReadError(f"{path} is not valid UTF-8: {exc}") from exc
        return SourceFile(path=path, raw=raw, text=text)

    @staticmethod
    def _write(path: Path, payload: bytes) -> None:
        """Replace ``path`` atomically so a failed write never leaves a partial file."""
        tmp_name: Optional[str] = None
        try:
            mode = path.stat().st_mode & 0o7777
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise WriteError(f"failed to write Go code to {path}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)


class Orchestrator:
    """Coordinates discovery and the annotation pipeline for a CLI run."""

    def __init__(
        self,
        config: GocmtConfig,
        *,
        change_set: ChangeSetDiscovery | None = None,
        formatter: Formatter | None = None,
    ) -> None:
        self.config = config
        self.change_set = change_set or ChangeSetDiscovery()
        self.formatter = formatter or GoFormatter(config.formatter.executable)
        self.logger = get_logger("orchestrator")

    def discover(self, *, path: str | None = None, ref: str | None = None) -> List[Path]:
        """Resolve target files from exactly one of ``path`` or ``ref``."""
        if (path is None) == (ref is None):
            raise ValueError("exactly one of path or ref must be given")
        excludes: Sequence[str] = self.config.exclude_paths
        if path is not None:
            files = discover_paths(path, excludes)
        else:
            files = self.change_set.discover(ref or "", excludes)
        self.logger.info("Discovered %d file(s) for processing", len(files))
        return files

    def run(
        self,
        files: Sequence[Path],
        annotator: Annotator,
        *,
        concurrency: int | None = None,
        on_start: StartCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> RunSummary:
        pipeline = Pipeline(
            annotator,
            formatter=self.formatter,
            concurrency=concurrency or self.config.concurrency or 1,
            on_start=on_start,
            on_progress=on_progress,
        )
        return pipeline.run(files)


__all__ = ["Annotator", "Orchestrator", "Pipeline", "ProgressCallback", "StartCallback"]
