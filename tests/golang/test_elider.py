"""Tests for body elision and prologue stripping."""

from __future__ import annotations

import pytest

from gocmt.errors import BoilerplateNotFoundError
from gocmt.golang.elider import elide_bodies, prepare_request_source, strip_boilerplate
from gocmt.golang.formatter import GoFormatter
from gocmt.golang.structure import parse_source
from tests._fixtures.go import GOFMT_AVAILABLE, go_source

SOURCE = go_source(
    """
    package demo

    import (
    \t"fmt"
    )

    // Greet prints a greeting.
    func Greet(name string) error {
    \t// say it loudly
    \tfmt.Println("hello", name)
    \treturn nil
    }

    type Greeter interface {
    \tGreet(name string) error
    }
    """
)


def test_elide_bodies_keeps_signatures_and_doc_comments(identity_formatter) -> None:
    model = parse_source(SOURCE)

    elided = elide_bodies(model, identity_formatter)

    assert "// Greet prints a greeting.\nfunc Greet(name string) error {}" in elided
    assert "Println" not in elided
    assert "say it loudly" not in elided
    assert "type Greeter interface {\n\tGreet(name string) error\n}" in elided
    rebuilt = parse_source(elided)
    assert rebuilt.comments.doc_for(rebuilt.nodes[0]) == ("// Greet prints a greeting.",)


def test_elide_bodies_passes_result_through_formatter() -> None:
    model = parse_source("func A() {\n\treturn\n}\n")
    seen: list[str] = []

    def formatter(source: str) -> str:
        seen.append(source)
        return source.upper()

    assert elide_bodies(model, formatter) == "FUNC A() {}\n"
    assert seen == ["func A() {}\n"]


def test_strip_boilerplate_removes_package_and_import_block(identity_formatter) -> None:
    elided = elide_bodies(parse_source(SOURCE), identity_formatter)

    stripped = strip_boilerplate(elided)

    assert stripped.startswith("// Greet prints a greeting.")
    assert "package demo" not in stripped
    assert '"fmt"' not in stripped


def test_strip_boilerplate_requires_parenthesised_imports() -> None:
    with pytest.raises(BoilerplateNotFoundError):
        strip_boilerplate('package demo\n\nimport "fmt"\n\nfunc A() {}\n')


def test_prepare_request_source_falls_back_to_unstripped_text(identity_formatter) -> None:
    source = 'package demo\n\nimport "fmt"\n\nfunc A() {\n\tfmt.Println()\n}\n'

    prepared = prepare_request_source(parse_source(source), identity_formatter)

    assert prepared == 'package demo\n\nimport "fmt"\n\nfunc A() {}\n'


def test_prepare_request_source_strips_when_possible(identity_formatter) -> None:
    prepared = prepare_request_source(parse_source(SOURCE), identity_formatter)

    assert not prepared.startswith("package")
    assert prepared.endswith("}")


@pytest.mark.skipif(not GOFMT_AVAILABLE, reason="gofmt not installed")
def test_elided_output_is_canonical_gofmt() -> None:
    formatter = GoFormatter()
    model = parse_source(formatter(SOURCE))

    elided = elide_bodies(model, formatter)

    assert formatter(elided) == elided
