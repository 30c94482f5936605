"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import gocmt.cli as cli
from gocmt.cli import _build_parser, main
from gocmt.orchestrator import Orchestrator


def test_cli_accepts_file_mode() -> None:
    args = _build_parser().parse_args(["-f", "pkg/", "-n", "4"])

    assert args.path == "pkg/"
    assert args.ref is None
    assert args.concurrency == 4


def test_cli_accepts_change_set_mode() -> None:
    args = _build_parser().parse_args(["-c", "HEAD~3...HEAD", "--verbose"])

    assert args.ref == "HEAD~3...HEAD"
    assert args.path is None
    assert args.verbose is True
    assert args.concurrency is None


@pytest.mark.parametrize("argv", [[], ["-f", "a.go", "-c", "HEAD"], ["-f", "a.go", "-n", "0"]])
def test_cli_usage_errors_exit_non_zero(argv: list[str], capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args(argv)

    assert excinfo.value.code == 2
    assert "usage: gocmt" in capsys.readouterr().err


def test_cli_help_exits_cleanly(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args(["-h"])

    assert excinfo.value.code == 0
    assert "gocmt -c commitID1...commitID2" in capsys.readouterr().out


def _base_argv(tmp_path: Path) -> list[str]:
    return ["--config", str(tmp_path / ".gocmt.yml"), "--log-file", str(tmp_path / "gocmt.log")]


def test_main_reports_nothing_to_do(tmp_path: Path, capsys, monkeypatch) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "notes.txt").write_text("hello", encoding="utf-8")
    monkeypatch.delenv("MOONSHOT_API_KEY", raising=False)

    main(["-f", str(tmp_path / "src"), *_base_argv(tmp_path)])

    assert "Hint: no go files found for processing." in capsys.readouterr().out


def test_main_requires_api_key(tmp_path: Path, capsys, monkeypatch) -> None:
    target = tmp_path / "main.go"
    target.write_text("package main\n", encoding="utf-8")
    monkeypatch.delenv("MOONSHOT_API_KEY", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        main(["-f", str(target), *_base_argv(tmp_path)])

    assert excinfo.value.code == 1
    assert "MOONSHOT_API_KEY is not set" in capsys.readouterr().err
    assert target.read_text(encoding="utf-8") == "package main\n"


def test_main_exits_on_discovery_error(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["-f", str(tmp_path / "missing"), *_base_argv(tmp_path)])

    assert excinfo.value.code == 1
    assert "× Error:" in capsys.readouterr().err


def test_main_processes_files_and_logs(tmp_path: Path, capsys, monkeypatch) -> None:
    target = tmp_path / "foo.go"
    target.write_text("func Foo() {}\n", encoding="utf-8")
    monkeypatch.setenv("MOONSHOT_API_KEY", "test-key")

    class IdentityOrchestrator(Orchestrator):
        def __init__(self, config):  # type: ignore[no-untyped-def]
            super().__init__(config, formatter=lambda source: source)

    def fake_runner(request):  # type: ignore[no-untyped-def]
        return json.dumps({"comments": [{"position": "func Foo", "comment": "Foo does X."}]})

    real_from_env = cli.LLMRunner.from_env

    def from_env(*args, **kwargs):  # type: ignore[no-untyped-def]
        return real_from_env(*args, runner=fake_runner, **kwargs)

    monkeypatch.setattr(cli, "Orchestrator", IdentityOrchestrator)
    monkeypatch.setattr(cli.LLMRunner, "from_env", staticmethod(from_env))

    main(["-f", str(target), "-n", "2", *_base_argv(tmp_path)])

    out = capsys.readouterr().out
    assert f"» Processing {target}..." in out
    assert f"✔ Processed file {target}" in out
    assert "Progress: 1/1, 100.00%" in out
    assert "All files processed." in out
    assert target.read_text(encoding="utf-8") == "// Foo does X.\nfunc Foo() {}\n"
    assert "Processing file:" in (tmp_path / "gocmt.log").read_text(encoding="utf-8")
