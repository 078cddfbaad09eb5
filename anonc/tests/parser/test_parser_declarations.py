# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from anonc.parser import parse_program, parse_source, parse_source_file
from anonc.parser.ast import AnonymousObjectCreation, MemberDeclKind, TypeDeclKind

SOURCE = """
// declarations
class Person { Name: string; static Count: int; }
struct Point { X: int; }
ref struct Slice { Length: int; }
let raw: int**;
fn Make(a: int, b: string): Person;
fn Log(): void;

method Main {
	new { a = 1 };
	local Helper { n; }
}
field Cache = new { a = 1 };
const Limit = 1;
param Default = 2;
script { 1; 2; }
type Holder { 3; }
"""


def test_type_declarations():
	program = parse_program(SOURCE)

	assert [(t.kind, t.name) for t in program.types] == [
		(TypeDeclKind.CLASS, "Person"),
		(TypeDeclKind.STRUCT, "Point"),
		(TypeDeclKind.REF_STRUCT, "Slice"),
	]
	person = program.types[0]
	assert [(f.name, str(f.type_ref), f.is_static) for f in person.fields] == [
		("Name", "string", False),
		("Count", "int", True),
	]


def test_globals_and_functions():
	program = parse_program(SOURCE)

	(raw,) = program.globals
	assert raw.name == "raw"
	assert raw.type_ref.name == "int"
	assert raw.type_ref.pointer_depth == 2
	make, log = program.functions
	assert make.name == "Make"
	assert [(p.name, str(p.type_ref)) for p in make.params] == [("a", "int"), ("b", "string")]
	assert str(make.return_type) == "Person"
	assert log.params == ()
	assert str(log.return_type) == "void"


def test_member_declarations():
	program = parse_program(SOURCE)

	assert [(m.kind, m.name) for m in program.members] == [
		(MemberDeclKind.METHOD, "Main"),
		(MemberDeclKind.FIELD, "Cache"),
		(MemberDeclKind.CONST, "Limit"),
		(MemberDeclKind.PARAM, "Default"),
		(MemberDeclKind.SCRIPT, "<script>"),
		(MemberDeclKind.TYPE, "Holder"),
	]
	main = program.members[0]
	assert len(main.exprs) == 1
	assert isinstance(main.exprs[0], AnonymousObjectCreation)
	(helper,) = main.locals
	assert helper.kind is MemberDeclKind.LOCAL_FUNCTION
	assert helper.name == "Helper"
	assert [str(e) for e in helper.exprs] == ["n"]
	assert isinstance(program.members[1].exprs[0], AnonymousObjectCreation)
	assert [str(e) for e in program.members[4].exprs] == ["1", "2"]


def test_empty_source_is_an_empty_program():
	program = parse_program("")

	assert program.types == []
	assert program.members == []


@pytest.mark.parametrize(
	"source",
	[
		"method Main { new { x = }; }",
		r'method Main { new { v = "\x" }; }',
		r'method Main { new { v = "\x4" }; }',
		r'method Main { new { v = "\N{BOGUS}" }; }',
		r'method Main { new { v = "\u12" }; }',
	],
)
def test_syntax_errors_become_parser_diagnostics(source: str):
	program, diags = parse_source(source, file="bad.src")

	assert program is None
	(diag,) = diags
	assert diag.phase == "parser"
	assert diag.severity == "error"
	assert diag.span.file == "bad.src"
	assert diag.span.line == 1
	assert diag.span.column == 25
	assert "\n" not in diag.message


def test_parse_source_file(tmp_path: Path):
	src = tmp_path / "main.src"
	src.write_text("let n: int;\nmethod Main { new { n }; }\n")

	program, diags = parse_source_file(src)

	assert diags == []
	assert program.globals[0].name == "n"


def test_bad_escape_message_names_the_problem():
	_, diags = parse_source(r'let s: string; field F = "\N{BOGUS}";')

	assert diags[0].message.startswith("invalid escape in string literal")
	assert diags[0].span.column == 26


def test_source_file_must_be_utf8(tmp_path: Path):
	src = tmp_path / "bad.src"
	src.write_bytes(b"let n: int;\nmethod Main { \xff }\n")

	program, diags = parse_source_file(src)

	assert program is None
	(diag,) = diags
	assert diag.phase == "parser"
	assert (diag.span.line, diag.span.column) == (2, 15)
	assert "offset 26" in diag.message
	assert "0xff" in diag.message
