# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Member name inference for anonymous object creation.

A declarator without `name =` takes its name from the expression when the
expression is a simple name, a member access, a qualified name, or a
conditional access chain ending in a member binding:

	new { x }          -> x
	new { p.Name }     -> Name
	new { A::B::C }    -> C
	new { p?.Next.Id } -> Id
	new { p?.Next?.Id } -> Id

Any other shape (calls, literals, operators, parenthesized expressions)
carries no name.
"""

from __future__ import annotations

from typing import Optional

from anonc.parser.ast import ExprShape, Expr, Name


def is_anonymous_type_member_expression(expr: Expr) -> bool:
	"""True when `expr` has one of the shapes a member name can be taken from."""
	while True:
		shape = expr.shape
		if shape is ExprShape.QUALIFIED_NAME:
			expr = expr.right
			continue
		if shape is ExprShape.CONDITIONAL_ACCESS:
			expr = expr.when_not_null
			if expr.shape is ExprShape.MEMBER_BINDING:
				return True
			continue
		if shape is ExprShape.IDENTIFIER or shape is ExprShape.MEMBER_ACCESS:
			return True
		return False


def extract_anonymous_type_member_name(expr: Expr) -> Optional[Name]:
	"""
	Return the name node the member name is taken from, or None.

	This also answers for member bindings, which only occur inside a
	conditional access; `is_anonymous_type_member_expression` is the check for
	whether a whole declarator expression is acceptable.
	"""
	while True:
		shape = expr.shape
		if shape is ExprShape.IDENTIFIER:
			return expr
		if shape is ExprShape.MEMBER_ACCESS:
			return expr.name
		if shape is ExprShape.MEMBER_BINDING:
			return expr.name
		if shape is ExprShape.QUALIFIED_NAME:
			expr = expr.right
			continue
		if shape is ExprShape.CONDITIONAL_ACCESS:
			expr = expr.when_not_null
			continue
		return None


def is_identifier_name(name: Optional[Name]) -> bool:
	"""True when `name` holds a well-formed identifier token."""
	return name is not None and name.ident.text.isidentifier()


__all__ = ["is_anonymous_type_member_expression", "extract_anonymous_type_member_name", "is_identifier_name"]
