# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for binder tests.

These keep tests focused on the expression under test: declarations are
written as source text, the expression is parsed on its own and bound in a
containing member of the requested kind.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from anonc.binder.bound_nodes import BoundExpression
from anonc.binder.expr_binder import BindOptions, Binder
from anonc.binder.symbols import ContainingMember, MemberKind
from anonc.compilation import BindResult, Compilation
from anonc.core.diagnostics import Diagnostic
from anonc.parser import parse_expr, parse_program

# Declarations most binder tests can share.
DEFAULT_DECLS = """
class Person { Name: string; Age: int; Next: Person; static Count: int; }
struct Point { X: int; Y: int; }
ref struct Slice { Length: int; }
let p: Person;
let pt: Point;
let raw: int*;
let slice: Slice;
let n: int;
let s: string;
fn Log(): void;
fn Make(a: int): Person;
fn Len(x: string): int;
"""

METHOD = ContainingMember(kind=MemberKind.METHOD, name="Main")


def make_compilation(decls: str = DEFAULT_DECLS, *, nullable: Optional[bool] = None) -> Compilation:
	return Compilation(parse_program(decls), options=BindOptions(nullable=nullable), file="test.src")


def make_binder(
	decls: str = DEFAULT_DECLS,
	*,
	member: Optional[ContainingMember] = METHOD,
	nullable: Optional[bool] = None,
) -> Binder:
	return make_compilation(decls, nullable=nullable).binder_for(member)


def bind_expr(
	source: str,
	*,
	decls: str = DEFAULT_DECLS,
	member: Optional[ContainingMember] = METHOD,
	nullable: Optional[bool] = None,
	binder: Optional[Binder] = None,
) -> Tuple[BoundExpression, List[Diagnostic], Binder]:
	"""Parse and bind one expression; returns (bound, diagnostics, binder)."""
	if binder is None:
		binder = make_binder(decls, member=member, nullable=nullable)
	diagnostics: List[Diagnostic] = []
	bound = binder.bind_value(parse_expr(source), diagnostics)
	return bound, diagnostics, binder


def compile_source(source: str, *, nullable: Optional[bool] = None, jobs: int = 1) -> Tuple[Compilation, BindResult]:
	compilation = Compilation(parse_program(source), options=BindOptions(nullable=nullable), file="test.src")
	return compilation, compilation.bind_all(jobs=jobs)


def codes(diagnostics: Iterable[Diagnostic]) -> List[Optional[str]]:
	return [d.code for d in diagnostics]


__all__ = [
	"DEFAULT_DECLS",
	"METHOD",
	"make_compilation",
	"make_binder",
	"bind_expr",
	"compile_source",
	"codes",
]
