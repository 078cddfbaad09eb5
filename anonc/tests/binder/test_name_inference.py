# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from anonc.binder.name_inference import (
	extract_anonymous_type_member_name,
	is_anonymous_type_member_expression,
	is_identifier_name,
)
from anonc.parser import parse_expr
from anonc.parser.ast import ErrorExpr, Identifier, Located, Name


@pytest.mark.parametrize(
	"source, expected",
	[
		("x", "x"),
		("p.Name", "Name"),
		("p.Next.Name", "Name"),
		("A::B", "B"),
		("A::B::C", "C"),
		("p?.Name", "Name"),
		("p?.Next.Name", "Name"),
		("p?.Next?.Name", "Name"),
		("Make(1).Name", "Name"),
		("(p).Name", "Name"),
	],
)
def test_member_names_are_inferred(source: str, expected: str):
	expr = parse_expr(source)

	assert is_anonymous_type_member_expression(expr)
	name = extract_anonymous_type_member_name(expr)
	assert name is not None
	assert name.ident.text == expected


@pytest.mark.parametrize(
	"source",
	[
		"1",
		'"text"',
		"null",
		"Log()",
		"p.Name + s",
		"(p)",
		"(p.Name)",
		"new { x = 1 }",
	],
)
def test_other_shapes_carry_no_name(source: str):
	expr = parse_expr(source)

	assert not is_anonymous_type_member_expression(expr)
	assert extract_anonymous_type_member_name(expr) is None


def test_conditional_chain_ending_in_a_call_is_not_a_member_expression():
	expr = parse_expr("p?.Name(1)")

	assert not is_anonymous_type_member_expression(expr)
	# Extraction stops at the call.
	assert extract_anonymous_type_member_name(expr) is None


def test_member_binding_answers_its_own_name():
	expr = parse_expr("p?.Name")

	binding = expr.when_not_null
	assert extract_anonymous_type_member_name(binding).ident.text == "Name"


def test_name_location_comes_from_the_member():
	name = extract_anonymous_type_member_name(parse_expr("p.Next.Age"))

	assert name.loc == Located(line=1, column=8)


def test_error_expressions_carry_no_name():
	expr = ErrorExpr(loc=Located(1, 1), text="?")

	assert not is_anonymous_type_member_expression(expr)
	assert extract_anonymous_type_member_name(expr) is None


def test_identifier_validity():
	loc = Located(1, 1)

	assert is_identifier_name(Name(loc=loc, ident=Identifier(text="Name", loc=loc)))
	assert is_identifier_name(Name(loc=loc, ident=Identifier(text="_x1", loc=loc)))
	assert not is_identifier_name(Name(loc=loc, ident=Identifier(text="", loc=loc)))
	assert not is_identifier_name(None)
