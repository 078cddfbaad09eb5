# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Bound tree: type-checked nodes produced by the binder.

Each node keeps the syntax it was bound from, its TypeId (None for
expressions without a type such as `null` or a method group) and a
`has_errors` flag for errors reported on the node itself.
`has_any_errors` also looks at the children, so later passes can skip
erroneous subtrees without re-reporting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from anonc.core.types_core import FieldSchema, TypeId
from anonc.parser import ast

from .anonymous_types import (
	AnonymousConstructorSymbol,
	AnonymousPropertySymbol,
	AnonymousTypeField,
	AnonymousTypeSymbol,
)
from .symbols import FunctionSymbol


class BoundExpression:
	syntax: ast.Expr
	type: Optional[TypeId]
	has_errors: bool

	def children(self) -> Tuple["BoundExpression", ...]:
		return ()

	@property
	def has_any_errors(self) -> bool:
		return self.has_errors or any(child.has_any_errors for child in self.children())

	@property
	def display(self) -> str:
		"""Text used for this expression in diagnostics when it has no type."""
		return str(self.syntax)


@dataclass(eq=False)
class BoundLiteral(BoundExpression):
	syntax: ast.Literal
	type: Optional[TypeId]
	value: object
	has_errors: bool = False

	@property
	def display(self) -> str:
		if self.syntax.kind == "null":
			return "<null>"
		return str(self.syntax)


@dataclass(eq=False)
class BoundGlobal(BoundExpression):
	syntax: ast.Expr
	name: str
	type: TypeId
	has_errors: bool = False


@dataclass(eq=False)
class BoundFieldAccess(BoundExpression):
	"""Instance field access (receiver set) or static field access (receiver None)."""

	syntax: ast.Expr
	receiver: Optional[BoundExpression]
	field: FieldSchema
	type: TypeId
	has_errors: bool = False

	def children(self) -> Tuple[BoundExpression, ...]:
		return () if self.receiver is None else (self.receiver,)


@dataclass(eq=False)
class BoundConditionalReceiver(BoundExpression):
	"""Stands for the already-evaluated, non-null receiver inside `?.`."""

	syntax: ast.Expr
	type: TypeId
	has_errors: bool = False


@dataclass(eq=False)
class BoundConditionalAccess(BoundExpression):
	syntax: ast.ConditionalAccess
	receiver: BoundExpression
	access: BoundExpression
	type: Optional[TypeId]
	has_errors: bool = False

	def children(self) -> Tuple[BoundExpression, ...]:
		return (self.receiver, self.access)


@dataclass(eq=False)
class BoundMethodGroup(BoundExpression):
	syntax: ast.Expr
	function: FunctionSymbol
	type: Optional[TypeId] = None
	has_errors: bool = False

	@property
	def display(self) -> str:
		return "method group"


@dataclass(eq=False)
class BoundCall(BoundExpression):
	syntax: ast.Call
	function: FunctionSymbol
	arguments: Tuple[BoundExpression, ...]
	type: TypeId
	has_errors: bool = False

	def children(self) -> Tuple[BoundExpression, ...]:
		return self.arguments


@dataclass(eq=False)
class BoundBinary(BoundExpression):
	syntax: ast.Binary
	op: str
	left: BoundExpression
	right: BoundExpression
	type: TypeId
	has_errors: bool = False

	def children(self) -> Tuple[BoundExpression, ...]:
		return (self.left, self.right)


@dataclass(eq=False)
class BoundBadExpression(BoundExpression):
	"""Result of an expression that failed to bind; keeps what did bind."""

	syntax: ast.Expr
	bound_children: Tuple[BoundExpression, ...] = ()
	type: Optional[TypeId] = None
	has_errors: bool = True

	def children(self) -> Tuple[BoundExpression, ...]:
		return self.bound_children


@dataclass(eq=False)
class BoundAnonymousPropertyDeclaration:
	"""Explicitly named anonymous type field, for semantic queries on `name =`."""

	syntax: ast.Name
	property: AnonymousPropertySymbol
	type_id: TypeId


@dataclass(eq=False)
class BoundAnonymousObjectCreation(BoundExpression):
	"""
	`new { ... }` after binding.

	`arguments[i]` and `fields[i]` belong to `syntax.initializers[i]` for every
	i, erroneous initializers included. `declarations` only has entries for
	initializers with a valid, unique explicit name.
	"""

	syntax: ast.AnonymousObjectCreation
	constructor: AnonymousConstructorSymbol
	arguments: Tuple[BoundExpression, ...]
	declarations: Tuple[BoundAnonymousPropertyDeclaration, ...]
	anonymous_type: AnonymousTypeSymbol
	fields: Tuple[AnonymousTypeField, ...]
	type: TypeId
	has_errors: bool = False

	def children(self) -> Tuple[BoundExpression, ...]:
		return self.arguments


def walk(node: BoundExpression) -> Iterator[BoundExpression]:
	"""Pre-order traversal of a bound tree."""
	yield node
	for child in node.children():
		yield from walk(child)


__all__ = [
	"BoundExpression",
	"BoundLiteral",
	"BoundGlobal",
	"BoundFieldAccess",
	"BoundConditionalReceiver",
	"BoundConditionalAccess",
	"BoundMethodGroup",
	"BoundCall",
	"BoundBinary",
	"BoundBadExpression",
	"BoundAnonymousPropertyDeclaration",
	"BoundAnonymousObjectCreation",
	"walk",
]
