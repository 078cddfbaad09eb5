# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from anonc.binder.bound_nodes import BoundAnonymousObjectCreation
from anonc.binder.symbols import MemberKind
from anonc.compilation import containing_member_for
from anonc.parser import parse_program
from anonc.test_support import codes, compile_source

SOURCE = """
class Person { Name: string; Age: int; static Count: int; }
let p: Person;
fn Log(): void;

method Main {
	new { x = 1, y = "a" };
	new { p.Name, Person::Count, p?.Age };
	local Helper { new { z = true }; }
}
field Cache = new { x = 1, y = "b" };
const Limit = new { a = 1 };
script { new { a = 1 }; }
type Holder { new { a = 1 }; }
param Default = new { a = 1 };
"""


def _creation_has_errors(result):
	out = []
	for member in result.members:
		for expr in member.all_expressions():
			if isinstance(expr, BoundAnonymousObjectCreation):
				out.append((member.containing_member.name, expr.has_errors))
	return out


def test_members_map_to_containing_members():
	program = parse_program(SOURCE)

	kinds = [containing_member_for(m) for m in program.members]

	assert [(c.kind, c.is_const, c.is_script_class) for c in kinds] == [
		(MemberKind.METHOD, False, False),
		(MemberKind.FIELD, False, False),
		(MemberKind.FIELD, True, False),
		(MemberKind.NAMED_TYPE, False, True),
		(MemberKind.NAMED_TYPE, False, False),
		(MemberKind.PARAMETER, False, False),
	]
	assert containing_member_for(program.members[0].locals[0]).kind is MemberKind.LOCAL_FUNCTION


def test_context_gate_per_member():
	compilation, result = compile_source(SOURCE)

	assert compilation.declaration_diagnostics == []
	assert codes(result.diagnostics) == ["AnonymousTypeNotAvailable"] * 3
	assert [d.span.line for d in result.diagnostics] == [12, 14, 15]
	assert _creation_has_errors(result) == [
		("Main", False),
		("Main", False),
		("Main", False),
		("Cache", False),
		("Limit", True),
		("<script>", False),
		("Holder", True),
		("Default", True),
	]


def test_local_functions_are_bound_with_their_own_member():
	_, result = compile_source(SOURCE)

	main = result.members[0]
	(helper,) = main.locals
	assert helper.containing_member.name == "Helper"
	assert isinstance(helper.expressions[0], BoundAnonymousObjectCreation)
	assert len(main.all_expressions()) == 3


def test_same_shape_shares_one_symbol_across_members():
	compilation, result = compile_source(SOURCE)

	main_first = result.members[0].expressions[0]
	cache = result.members[1].expressions[0]
	assert main_first.anonymous_type is cache.anonymous_type
	shared = {id(m.expressions[0].anonymous_type) for m in result.members[2:]}
	assert len(shared) == 1
	# x/y, Name/Count/Age, z and a.
	assert len(compilation.anonymous_types) == 4


def test_concurrent_binding_matches_sequential_binding():
	seq_compilation, sequential = compile_source(SOURCE, jobs=1)
	par_compilation, parallel = compile_source(SOURCE, jobs=4)

	assert [(d.code, d.span.line, d.span.column) for d in parallel.diagnostics] == [
		(d.code, d.span.line, d.span.column) for d in sequential.diagnostics
	]
	assert [m.containing_member.name for m in parallel.members] == [
		m.containing_member.name for m in sequential.members
	]
	seq_keys = sorted(
		tuple((n, seq_compilation.type_table.display(t)) for n, t in s.key)
		for s in seq_compilation.anonymous_types.symbols()
	)
	par_keys = sorted(
		tuple((n, par_compilation.type_table.display(t)) for n, t in s.key)
		for s in par_compilation.anonymous_types.symbols()
	)
	assert par_keys == seq_keys


def test_declaration_errors():
	source = """
class A { X: int; X: string; }
class A { }
let a: Missing;
let a: int;
fn a(): int;
fn F(x: Nope*): void;
method Main { new { v = a }; }
"""
	compilation, result = compile_source(source)

	diags = compilation.declaration_diagnostics
	assert codes(diags) == [
		"DuplicateDeclaration",
		"DuplicateDeclaration",
		"UnknownType",
		"DuplicateDeclaration",
		"DuplicateDeclaration",
		"UnknownType",
	]
	assert {d.phase for d in diags} == {"declare"}
	assert diags[0].message == "'A' is already declared"
	assert diags[1].message == "'A.X' is already declared"
	# `a` keeps its first declaration, typed with the unresolved name.
	assert codes(result.diagnostics) == []
	creation = result.members[0].expressions[0]
	assert compilation.type_table.display(creation.fields[0].type_id) == "Missing"
	assert compilation.type_table.is_error(creation.fields[0].type_id)


def test_nullable_option_reaches_every_member():
	_, result = compile_source("let p: object;\nmethod A { new { p }; }\nfield B = new { p };", nullable=True)

	annotations = [m.expressions[0].fields[0].nullable_annotation.value for m in result.members]
	assert annotations == ["Annotated", "Annotated"]
