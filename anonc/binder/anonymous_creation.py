# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Binding of anonymous object creation expressions (`new { a = 1, p.Name }`).

Pipeline for one creation expression:

1. resolve every field initializer in order: name (explicit or inferred),
   bound value, uniqueness, field type and nullable annotation;
2. intern the ordered fields in the anonymous type registry;
3. record property declarations for explicitly named fields;
4. check that anonymous types are allowed in the enclosing member;
5. build the bound node.

Every problem is reported as a diagnostic and binding always completes.
Field i of the synthesized type belongs to initializer i in every case,
erroneous initializers included: semantic queries on a declarator map it to a
property by position.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from anonc.core.diagnostics import Diagnostic, ErrorCode, error
from anonc.core.span import Span
from anonc.core.types_core import TypeId, TypeTable
from anonc.parser import ast

from .anonymous_types import AnonymousTypeField, NullableAnnotation, SymbolKind
from .bound_nodes import (
	BoundAnonymousObjectCreation,
	BoundAnonymousPropertyDeclaration,
	BoundExpression,
)
from .name_inference import (
	extract_anonymous_type_member_name,
	is_anonymous_type_member_expression,
	is_identifier_name,
)
from .symbols import ContainingMember, MemberKind

if TYPE_CHECKING:
	from .expr_binder import Binder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ResolvedField:
	field: AnonymousTypeField
	value: BoundExpression
	# Name node when the field got a valid identifier, else the initializer.
	syntax: ast.Name | ast.FieldInitializer
	# None when the name was missing, malformed or a duplicate.
	name: Optional[str]
	has_error: bool


def bind_anonymous_object_creation(
	binder: "Binder",
	node: ast.AnonymousObjectCreation,
	diagnostics: List[Diagnostic],
) -> BoundAnonymousObjectCreation:
	initializers = node.initializers
	field_count = len(initializers)
	has_error = False

	# Sized up front and written once per index so no error path can drop or
	# reorder a field.
	resolved: List[Optional[_ResolvedField]] = [None] * field_count

	# Names already used in this expression, in declaration order.
	unique_names: Dict[str, None] = {}

	for i, initializer in enumerate(initializers):
		resolved[i] = _resolve_field(binder, i, initializer, unique_names, diagnostics)
		has_error |= resolved[i].has_error

	fields = tuple(r.field for r in resolved)
	anonymous_type = binder.registry.intern(fields, binder.span(node.new_loc))

	declarations: List[BoundAnonymousPropertyDeclaration] = []
	for initializer, res in zip(initializers, resolved):
		if initializer.name_equals is None or res.name is None:
			continue
		for member in anonymous_type.get_members(res.name):
			if member.kind is SymbolKind.PROPERTY:
				declarations.append(
					BoundAnonymousPropertyDeclaration(syntax=res.syntax, property=member, type_id=res.field.type_id)
				)
				break

	if not anonymous_types_allowed(binder.containing_member):
		logger.debug("anonymous type denied in %s", binder.containing_member)
		diagnostics.append(error(ErrorCode.ANONYMOUS_TYPE_NOT_AVAILABLE, binder.span(node.new_loc)))
		has_error = True

	return BoundAnonymousObjectCreation(
		syntax=node,
		constructor=anonymous_type.instance_constructors[0],
		arguments=tuple(r.value for r in resolved),
		declarations=tuple(declarations),
		anonymous_type=anonymous_type,
		fields=fields,
		type=anonymous_type.type_id,
		has_errors=has_error,
	)


def _resolve_field(
	binder: "Binder",
	index: int,
	initializer: ast.FieldInitializer,
	unique_names: Dict[str, None],
	diagnostics: List[Diagnostic],
) -> _ResolvedField:
	has_error = False
	expression = initializer.expression

	if initializer.name_equals is not None:
		name_node: Optional[ast.Name] = initializer.name_equals.name
	else:
		if not is_anonymous_type_member_expression(expression):
			has_error = True
			diagnostics.append(error(ErrorCode.INVALID_MEMBER_DECLARATOR, binder.span(expression.loc)))
		name_node = extract_anonymous_type_member_name(expression)

	has_error |= expression.has_errors
	# Bound even when the declarator is malformed so its own errors surface.
	value = binder.bind_value(expression, diagnostics)

	field_name: Optional[str] = None
	if is_identifier_name(name_node):
		field_name = name_node.ident.text
		if field_name in unique_names:
			diagnostics.append(error(ErrorCode.DUPLICATE_PROPERTY_NAME, binder.span(initializer.loc)))
			has_error = True
			field_name = None
		else:
			unique_names[field_name] = None
	else:
		has_error = True

	field_type, bad_type = anonymous_field_type(binder.type_table, value, binder.span(initializer.loc), diagnostics)
	has_error |= bad_type

	syntax: ast.Name | ast.FieldInitializer = name_node if is_identifier_name(name_node) else initializer
	field = AnonymousTypeField(
		name=field_name if field_name is not None else f"${index}",
		span=binder.span(syntax.loc),
		type_id=field_type,
		nullable_annotation=nullable_annotation_for(binder.type_table, field_type, binder.options.nullable),
	)
	return _ResolvedField(field=field, value=value, syntax=syntax, name=field_name, has_error=has_error)


def anonymous_field_type(
	table: TypeTable,
	expression: BoundExpression,
	error_span: Span,
	diagnostics: List[Diagnostic],
) -> Tuple[TypeId, bool]:
	"""
	Type to record for an anonymous type field holding `expression`.

	Returns `(type, is_error)`. void values get an error type; pointer and
	restricted types are kept but reported; a value without a type gets the
	generic error type. Expressions that already carry errors are not checked
	again.
	"""
	error_arg: Optional[str] = None
	expression_type = expression.type

	if not expression.has_any_errors:
		if expression_type is not None:
			if table.is_void(expression_type):
				error_arg = table.display(expression_type)
				expression_type = table.ensure_error("void")
			elif table.is_unsafe(expression_type):
				error_arg = table.display(expression_type)
			elif table.is_restricted(expression_type):
				error_arg = table.display(expression_type)
		else:
			error_arg = expression.display

	if expression_type is None:
		expression_type = table.ensure_error("error")

	if error_arg is not None:
		diagnostics.append(error(ErrorCode.BAD_PROPERTY_VALUE_TYPE, error_span, error_arg))
		return expression_type, True
	return expression_type, False


def nullable_annotation_for(table: TypeTable, type_id: TypeId, nullable: Optional[bool]) -> NullableAnnotation:
	if nullable is None:
		return NullableAnnotation.UNKNOWN
	if nullable and table.is_reference_type(type_id):
		return NullableAnnotation.ANNOTATED
	return NullableAnnotation.NOT_ANNOTATED


def anonymous_types_allowed(member: Optional[ContainingMember]) -> bool:
	"""Whether `new { ... }` may appear in the body of `member`."""
	if member is None:
		return False
	if member.kind in (MemberKind.METHOD, MemberKind.LOCAL_FUNCTION, MemberKind.LAMBDA):
		return True
	if member.kind is MemberKind.FIELD:
		return not member.is_const
	if member.kind is MemberKind.NAMED_TYPE:
		# Script classes hold top-level statements.
		return member.is_script_class
	return False


__all__ = [
	"bind_anonymous_object_creation",
	"anonymous_field_type",
	"nullable_annotation_for",
	"anonymous_types_allowed",
]
