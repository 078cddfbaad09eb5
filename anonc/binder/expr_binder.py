# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Expression binder.

`Binder.bind_value` turns any surface expression into a bound node and always
succeeds: failures produce a `BoundBadExpression` plus a diagnostic (or no
diagnostic when the failure is a consequence of an error already reported
for a sub-expression). Anonymous object creation is delegated to
`anonymous_creation.bind_anonymous_object_creation`.

A Binder is created per member body and is not shared between threads; the
TypeTable and the anonymous type registry it holds are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from anonc.core.diagnostics import Diagnostic, ErrorCode, error
from anonc.core.span import Span
from anonc.core.types_core import TypeId, TypeKind, TypeTable
from anonc.parser import ast
from anonc.parser.ast import ExprShape

from .anonymous_creation import bind_anonymous_object_creation
from .anonymous_types import AnonymousTypeRegistry
from .bound_nodes import (
	BoundBadExpression,
	BoundBinary,
	BoundCall,
	BoundConditionalAccess,
	BoundConditionalReceiver,
	BoundExpression,
	BoundFieldAccess,
	BoundGlobal,
	BoundLiteral,
	BoundMethodGroup,
)
from .symbols import ContainingMember, SymbolTable


@dataclass(frozen=True)
class BindOptions:
	"""
	Options that affect binding.

	`nullable` is the nullable-reference-types feature state: True (enabled),
	False (disabled) or None (not specified).
	"""

	nullable: Optional[bool] = None


class Binder:
	"""Binds expressions of a single member body."""

	def __init__(
		self,
		*,
		type_table: TypeTable,
		registry: AnonymousTypeRegistry,
		symbols: SymbolTable,
		containing_member: Optional[ContainingMember],
		options: BindOptions = BindOptions(),
		file: Optional[str] = None,
	) -> None:
		self.type_table = type_table
		self.registry = registry
		self.symbols = symbols
		self.containing_member = containing_member
		self.options = options
		self.file = file
		# Receivers of the enclosing `?.` operators, innermost last.
		self._conditional_receivers: List[BoundConditionalReceiver] = []

	def span(self, loc: Optional[ast.Located]) -> Span:
		return Span.from_loc(loc, file=self.file)

	def bind_value(self, expr: ast.Expr, diagnostics: List[Diagnostic]) -> BoundExpression:
		"""Bind `expr` for reading its value."""
		shape = expr.shape
		if shape is ExprShape.IDENTIFIER:
			return self._bind_name(expr, diagnostics)
		if shape is ExprShape.MEMBER_ACCESS:
			return self._bind_member_access(expr, diagnostics)
		if shape is ExprShape.QUALIFIED_NAME:
			return self._bind_qualified_name(expr, diagnostics)
		if shape is ExprShape.CONDITIONAL_ACCESS:
			return self._bind_conditional_access(expr, diagnostics)
		if shape is ExprShape.MEMBER_BINDING:
			return self._bind_member_binding(expr, diagnostics)
		if shape is ExprShape.INVOCATION:
			return self._bind_call(expr, diagnostics)
		if shape is ExprShape.LITERAL:
			return self._bind_literal(expr)
		if shape is ExprShape.BINARY:
			return self._bind_binary(expr, diagnostics)
		if shape is ExprShape.PARENTHESIZED:
			return self.bind_value(expr.inner, diagnostics)
		if shape is ExprShape.ANONYMOUS_CREATION:
			return bind_anonymous_object_creation(self, expr, diagnostics)
		if shape is ExprShape.ERROR:
			# The parser already reported this one.
			return BoundBadExpression(syntax=expr)
		raise TypeError(f"unhandled expression shape {shape}")

	def _bind_name(self, expr: ast.Name, diagnostics: List[Diagnostic]) -> BoundExpression:
		name = expr.ident.text
		glob = self.symbols.lookup_global(name)
		if glob is not None:
			return BoundGlobal(syntax=expr, name=name, type=glob.type_id)
		fn = self.symbols.lookup_function(name)
		if fn is not None:
			return BoundMethodGroup(syntax=expr, function=fn)
		if self.type_table.lookup(name) is not None:
			diagnostics.append(error(ErrorCode.NOT_A_VALUE, self.span(expr.loc), name))
			return BoundBadExpression(syntax=expr)
		diagnostics.append(error(ErrorCode.UNDEFINED_NAME, self.span(expr.loc), name))
		return BoundBadExpression(syntax=expr)

	def _bind_member_access(self, expr: ast.MemberAccess, diagnostics: List[Diagnostic]) -> BoundExpression:
		# `Type.StaticField` is accepted alongside `Type::StaticField`.
		static_owner = self._type_named_by(expr.target)
		if static_owner is not None:
			return self._bind_static_field(expr, static_owner, expr.name, diagnostics)
		receiver = self.bind_value(expr.target, diagnostics)
		return self._bind_instance_field(expr, receiver, expr.name, diagnostics)

	def _bind_qualified_name(self, expr: ast.QualifiedName, diagnostics: List[Diagnostic]) -> BoundExpression:
		left = expr.left
		owner = self._type_named_by(left)
		if owner is None:
			if left.shape is ExprShape.IDENTIFIER:
				diagnostics.append(error(ErrorCode.UNKNOWN_TYPE, self.span(left.loc), left.ident.text))
				return BoundBadExpression(syntax=expr)
			# Nested qualification only names static fields of a type, which
			# do not have members of their own here.
			inner = self.bind_value(left, diagnostics)
			if not inner.has_any_errors:
				diagnostics.append(error(ErrorCode.UNKNOWN_TYPE, self.span(left.loc), str(left)))
			return BoundBadExpression(syntax=expr, bound_children=(inner,))
		return self._bind_static_field(expr, owner, expr.right, diagnostics)

	def _bind_conditional_access(self, expr: ast.ConditionalAccess, diagnostics: List[Diagnostic]) -> BoundExpression:
		receiver = self.bind_value(expr.target, diagnostics)
		if receiver.has_any_errors:
			return BoundBadExpression(syntax=expr, bound_children=(receiver,))
		table = self.type_table
		if receiver.type is None or not table.admits_null(receiver.type):
			diagnostics.append(error(ErrorCode.BAD_CONDITIONAL_RECEIVER, self.span(expr.loc), self._describe(receiver)))
			return BoundBadExpression(syntax=expr, bound_children=(receiver,))
		access_type = receiver.type
		td = table.get(access_type)
		if td.kind is TypeKind.NULLABLE:
			access_type = td.param_types[0]
		placeholder = BoundConditionalReceiver(syntax=expr.target, type=access_type)
		self._conditional_receivers.append(placeholder)
		try:
			access = self.bind_value(expr.when_not_null, diagnostics)
		finally:
			self._conditional_receivers.pop()
		result_type: Optional[TypeId] = access.type
		if result_type is not None and not table.is_void(result_type):
			result_type = table.new_nullable(result_type)
		return BoundConditionalAccess(syntax=expr, receiver=receiver, access=access, type=result_type)

	def _bind_member_binding(self, expr: ast.MemberBinding, diagnostics: List[Diagnostic]) -> BoundExpression:
		if not self._conditional_receivers:
			raise TypeError("member binding outside of a conditional access")
		receiver = self._conditional_receivers[-1]
		return self._bind_instance_field(expr, receiver, expr.name, diagnostics)

	def _bind_call(self, expr: ast.Call, diagnostics: List[Diagnostic]) -> BoundExpression:
		target = self.bind_value(expr.func, diagnostics)
		args = tuple(self.bind_value(arg, diagnostics) for arg in expr.args)
		if target.has_any_errors:
			return BoundBadExpression(syntax=expr, bound_children=(target, *args))
		if not isinstance(target, BoundMethodGroup):
			diagnostics.append(error(ErrorCode.NOT_INVOCABLE, self.span(expr.loc), str(expr.func)))
			return BoundBadExpression(syntax=expr, bound_children=(target, *args))
		fn = target.function
		if len(args) != len(fn.param_types):
			diagnostics.append(error(ErrorCode.BAD_ARITY, self.span(expr.loc), fn.name, len(fn.param_types), len(args)))
			return BoundBadExpression(syntax=expr, bound_children=args)
		return BoundCall(syntax=expr, function=fn, arguments=args, type=fn.return_type)

	def _bind_literal(self, expr: ast.Literal) -> BoundExpression:
		table = self.type_table
		if expr.kind == "int":
			ty: Optional[TypeId] = table.ensure_int()
		elif expr.kind == "string":
			ty = table.ensure_string()
		elif expr.kind == "bool":
			ty = table.ensure_bool()
		else:
			ty = None  # `null` has no type of its own
		return BoundLiteral(syntax=expr, type=ty, value=expr.value)

	def _bind_binary(self, expr: ast.Binary, diagnostics: List[Diagnostic]) -> BoundExpression:
		left = self.bind_value(expr.left, diagnostics)
		right = self.bind_value(expr.right, diagnostics)
		if left.has_any_errors or right.has_any_errors:
			return BoundBadExpression(syntax=expr, bound_children=(left, right))
		table = self.type_table
		int_ty = table.ensure_int()
		string_ty = table.ensure_string()
		result: Optional[TypeId] = None
		if left.type == int_ty and right.type == int_ty:
			result = int_ty
		elif string_ty in (left.type, right.type) and self._is_string_operand(left) and self._is_string_operand(right):
			result = string_ty
		if result is None:
			diagnostics.append(
				error(
					ErrorCode.BAD_BINARY_OPERANDS,
					self.span(expr.loc),
					expr.op,
					self._describe(left),
					self._describe(right),
				)
			)
			return BoundBadExpression(syntax=expr, bound_children=(left, right))
		return BoundBinary(syntax=expr, op=expr.op, left=left, right=right, type=result)

	def _is_string_operand(self, operand: BoundExpression) -> bool:
		# String concatenation accepts any value except void, method groups
		# and pointers.
		if operand.type is None:
			return isinstance(operand, BoundLiteral)
		return not (self.type_table.is_void(operand.type) or self.type_table.is_unsafe(operand.type))

	def _bind_instance_field(
		self,
		expr: ast.Expr,
		receiver: BoundExpression,
		member: ast.Name,
		diagnostics: List[Diagnostic],
	) -> BoundExpression:
		if receiver.has_any_errors:
			return BoundBadExpression(syntax=expr, bound_children=(receiver,))
		schema = None
		if receiver.type is not None:
			schema = self.type_table.find_field(receiver.type, member.ident.text, static=False)
		if schema is None:
			diagnostics.append(
				error(ErrorCode.NO_SUCH_MEMBER, self.span(member.loc), self._describe(receiver), member.ident.text)
			)
			return BoundBadExpression(syntax=expr, bound_children=(receiver,))
		return BoundFieldAccess(syntax=expr, receiver=receiver, field=schema, type=schema.type_id)

	def _bind_static_field(
		self,
		expr: ast.Expr,
		owner: TypeId,
		member: ast.Name,
		diagnostics: List[Diagnostic],
	) -> BoundExpression:
		schema = self.type_table.find_field(owner, member.ident.text, static=True)
		if schema is None:
			diagnostics.append(
				error(ErrorCode.NO_SUCH_MEMBER, self.span(member.loc), self.type_table.display(owner), member.ident.text)
			)
			return BoundBadExpression(syntax=expr)
		return BoundFieldAccess(syntax=expr, receiver=None, field=schema, type=schema.type_id)

	def _type_named_by(self, expr: ast.Expr) -> Optional[TypeId]:
		"""The type a simple name refers to, unless a value of that name shadows it."""
		if expr.shape is not ExprShape.IDENTIFIER:
			return None
		name = expr.ident.text
		if self.symbols.is_declared(name):
			return None
		return self.type_table.lookup(name)

	def _describe(self, bound: BoundExpression) -> str:
		if bound.type is None:
			return bound.display
		return self.type_table.display(bound.type)


__all__ = ["BindOptions", "Binder"]
