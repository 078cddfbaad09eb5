# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Surface syntax tree produced by the parser.

Nodes are immutable and purely syntactic. Every expression carries a closed
`ExprShape` tag so passes that care about syntactic shape (anonymous member
name inference in particular) can dispatch on the tag instead of probing
Python classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Optional, Tuple, Union


@dataclass(frozen=True)
class Located:
	line: int
	column: int


@dataclass(frozen=True)
class Identifier:
	"""
	An identifier token.

	The parser only produces well-formed identifiers; an empty `text` stands
	for a token missing from erroneous source.
	"""

	text: str
	loc: Located

	def __str__(self) -> str:
		return self.text


class ExprShape(Enum):
	"""Closed set of expression shapes."""

	IDENTIFIER = auto()
	MEMBER_ACCESS = auto()
	QUALIFIED_NAME = auto()
	CONDITIONAL_ACCESS = auto()
	MEMBER_BINDING = auto()
	INVOCATION = auto()
	LITERAL = auto()
	BINARY = auto()
	PARENTHESIZED = auto()
	ANONYMOUS_CREATION = auto()
	ERROR = auto()


class Expr:
	"""Base class for expressions."""

	shape: ClassVar[ExprShape]
	loc: Located

	@property
	def has_errors(self) -> bool:
		"""True when the node came out of syntax error recovery."""
		return False


@dataclass(frozen=True)
class Name(Expr):
	shape: ClassVar[ExprShape] = ExprShape.IDENTIFIER
	loc: Located
	ident: Identifier

	def __str__(self) -> str:
		return self.ident.text


@dataclass(frozen=True)
class MemberAccess(Expr):
	"""`target.name`"""

	shape: ClassVar[ExprShape] = ExprShape.MEMBER_ACCESS
	loc: Located
	target: Expr
	name: Name

	def __str__(self) -> str:
		return f"{self.target}.{self.name}"


@dataclass(frozen=True)
class QualifiedName(Expr):
	"""`Left::Right`, left-nested for longer paths."""

	shape: ClassVar[ExprShape] = ExprShape.QUALIFIED_NAME
	loc: Located
	left: Union["QualifiedName", Name]
	right: Name

	def __str__(self) -> str:
		return f"{self.left}::{self.right}"


@dataclass(frozen=True)
class MemberBinding(Expr):
	"""`.name` bound against the receiver of the enclosing conditional access."""

	shape: ClassVar[ExprShape] = ExprShape.MEMBER_BINDING
	loc: Located
	name: Name

	def __str__(self) -> str:
		return f".{self.name}"


@dataclass(frozen=True)
class ConditionalAccess(Expr):
	"""
	`target?.<when_not_null>`

	`when_not_null` starts with a MemberBinding; the rest of the postfix chain
	is nested inside it, so `a?.b.c` is `ConditionalAccess(a, MemberAccess(.b, c))`
	and `a?.b?.c` is `ConditionalAccess(a, ConditionalAccess(.b, .c))`.
	"""

	shape: ClassVar[ExprShape] = ExprShape.CONDITIONAL_ACCESS
	loc: Located
	target: Expr
	when_not_null: Expr

	def __str__(self) -> str:
		return f"{self.target}?{self.when_not_null}"


@dataclass(frozen=True)
class Call(Expr):
	shape: ClassVar[ExprShape] = ExprShape.INVOCATION
	loc: Located
	func: Expr
	args: Tuple[Expr, ...] = ()

	def __str__(self) -> str:
		return f"{self.func}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class Literal(Expr):
	"""Literal value; `kind` is one of "int", "string", "bool", "null"."""

	shape: ClassVar[ExprShape] = ExprShape.LITERAL
	loc: Located
	kind: str
	value: object = None

	def __str__(self) -> str:
		if self.kind == "null":
			return "null"
		if self.kind == "bool":
			return "true" if self.value else "false"
		if self.kind == "string":
			return '"' + str(self.value).replace("\\", "\\\\").replace('"', '\\"') + '"'
		return str(self.value)


@dataclass(frozen=True)
class Binary(Expr):
	shape: ClassVar[ExprShape] = ExprShape.BINARY
	loc: Located
	op: str
	left: Expr
	right: Expr

	def __str__(self) -> str:
		return f"{self.left} {self.op} {self.right}"


@dataclass(frozen=True)
class Parenthesized(Expr):
	shape: ClassVar[ExprShape] = ExprShape.PARENTHESIZED
	loc: Located
	inner: Expr

	def __str__(self) -> str:
		return f"({self.inner})"


@dataclass(frozen=True)
class NameEquals:
	"""The `name =` prefix of a field initializer."""

	loc: Located
	name: Name


@dataclass(frozen=True)
class FieldInitializer:
	"""One declarator of an anonymous object creation: `name = expr` or `expr`."""

	loc: Located
	name_equals: Optional[NameEquals]
	expression: Expr

	def __str__(self) -> str:
		if self.name_equals is not None:
			return f"{self.name_equals.name} = {self.expression}"
		return str(self.expression)


@dataclass(frozen=True)
class AnonymousObjectCreation(Expr):
	"""`new { init, ... }`; `new_loc` is the location of the `new` keyword."""

	shape: ClassVar[ExprShape] = ExprShape.ANONYMOUS_CREATION
	loc: Located
	new_loc: Located
	initializers: Tuple[FieldInitializer, ...] = ()

	def __str__(self) -> str:
		return "new { " + ", ".join(str(i) for i in self.initializers) + " }"


@dataclass(frozen=True)
class ErrorExpr(Expr):
	"""
	Placeholder for an expression that could not be parsed.

	The lark parser stops at the first syntax error and never builds one; it is
	for hosts that construct trees with error recovery.
	"""

	shape: ClassVar[ExprShape] = ExprShape.ERROR
	loc: Located
	text: str = ""

	@property
	def has_errors(self) -> bool:
		return True

	def __str__(self) -> str:
		return self.text


# Declarations


@dataclass(frozen=True)
class TypeRef:
	"""`name` followed by `pointer_depth` `*` suffixes."""

	loc: Located
	name: str
	pointer_depth: int = 0

	def __str__(self) -> str:
		return self.name + "*" * self.pointer_depth


@dataclass(frozen=True)
class FieldDecl:
	loc: Located
	name: str
	type_ref: TypeRef
	is_static: bool = False


class TypeDeclKind(Enum):
	CLASS = auto()
	STRUCT = auto()
	REF_STRUCT = auto()


@dataclass(frozen=True)
class TypeDecl:
	loc: Located
	kind: TypeDeclKind
	name: str
	fields: Tuple[FieldDecl, ...] = ()


@dataclass(frozen=True)
class GlobalDecl:
	"""`let name: type;`"""

	loc: Located
	name: str
	type_ref: TypeRef


@dataclass(frozen=True)
class ParamDecl:
	name: str
	type_ref: TypeRef


@dataclass(frozen=True)
class FunctionDecl:
	"""`fn name(params): return_type;` (signature only)."""

	loc: Located
	name: str
	params: Tuple[ParamDecl, ...]
	return_type: TypeRef


class MemberDeclKind(Enum):
	"""Kinds of members whose bodies contain bindable expressions."""

	METHOD = auto()
	LOCAL_FUNCTION = auto()
	FIELD = auto()
	CONST = auto()
	PARAM = auto()
	SCRIPT = auto()
	TYPE = auto()


@dataclass(frozen=True)
class MemberDecl:
	"""
	A member with bindable expressions.

	Field-like members (`field`, `const`, `param`) carry exactly one expression,
	their initializer. Body members carry expression statements plus nested
	local functions.
	"""

	loc: Located
	kind: MemberDeclKind
	name: str
	exprs: Tuple[Expr, ...] = ()
	locals: Tuple["MemberDecl", ...] = ()


@dataclass
class Program:
	types: list[TypeDecl] = field(default_factory=list)
	globals: list[GlobalDecl] = field(default_factory=list)
	functions: list[FunctionDecl] = field(default_factory=list)
	members: list[MemberDecl] = field(default_factory=list)


__all__ = [
	"Located",
	"Identifier",
	"ExprShape",
	"Expr",
	"Name",
	"MemberAccess",
	"QualifiedName",
	"MemberBinding",
	"ConditionalAccess",
	"Call",
	"Literal",
	"Binary",
	"Parenthesized",
	"NameEquals",
	"FieldInitializer",
	"AnonymousObjectCreation",
	"ErrorExpr",
	"TypeRef",
	"FieldDecl",
	"TypeDeclKind",
	"TypeDecl",
	"GlobalDecl",
	"ParamDecl",
	"FunctionDecl",
	"MemberDeclKind",
	"MemberDecl",
	"Program",
]
