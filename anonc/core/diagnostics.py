# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the parser and binder.

Diagnostics are plain records appended to a caller-owned list; binding code
never raises them. Every binder diagnostic carries a stable `code` (the value
of an `ErrorCode` member) so tests and tooling do not depend on message text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .span import Span


class ErrorCode(Enum):
	"""Stable error kinds reported by the binder."""

	# Anonymous object creation.
	INVALID_MEMBER_DECLARATOR = "InvalidMemberDeclarator"
	DUPLICATE_PROPERTY_NAME = "DuplicatePropertyName"
	BAD_PROPERTY_VALUE_TYPE = "BadPropertyValueType"
	ANONYMOUS_TYPE_NOT_AVAILABLE = "AnonymousTypeNotAvailable"

	# General expression binding.
	UNDEFINED_NAME = "UndefinedName"
	NO_SUCH_MEMBER = "NoSuchMember"
	NOT_A_VALUE = "NotAValue"
	NOT_INVOCABLE = "NotInvocable"
	BAD_ARITY = "BadArity"
	BAD_BINARY_OPERANDS = "BadBinaryOperands"
	BAD_CONDITIONAL_RECEIVER = "BadConditionalReceiver"

	# Declarations.
	DUPLICATE_DECLARATION = "DuplicateDeclaration"
	UNKNOWN_TYPE = "UnknownType"


_MESSAGES: dict[ErrorCode, str] = {
	ErrorCode.INVALID_MEMBER_DECLARATOR: (
		"invalid anonymous type member declarator; members must be declared with a "
		"member assignment, simple name or member access"
	),
	ErrorCode.DUPLICATE_PROPERTY_NAME: "an anonymous type cannot have multiple properties with the same name",
	ErrorCode.BAD_PROPERTY_VALUE_TYPE: "cannot assign '{0}' to anonymous type property",
	ErrorCode.ANONYMOUS_TYPE_NOT_AVAILABLE: "anonymous types are not available in this context",
	ErrorCode.UNDEFINED_NAME: "the name '{0}' does not exist in the current context",
	ErrorCode.NO_SUCH_MEMBER: "'{0}' does not contain a definition for '{1}'",
	ErrorCode.NOT_A_VALUE: "'{0}' is a type, which is not valid in the given context",
	ErrorCode.NOT_INVOCABLE: "'{0}' is not invocable",
	ErrorCode.BAD_ARITY: "'{0}' expects {1} argument(s), got {2}",
	ErrorCode.BAD_BINARY_OPERANDS: "operator '{0}' cannot be applied to operands of type '{1}' and '{2}'",
	ErrorCode.BAD_CONDITIONAL_RECEIVER: "operator '?.' cannot be applied to operand of type '{0}'",
	ErrorCode.DUPLICATE_DECLARATION: "'{0}' is already declared",
	ErrorCode.UNKNOWN_TYPE: "the type '{0}' could not be found",
}


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Optional phase label ("parser", "declare", "bind"); the driver falls back
	# to the phase it is reporting when this is unset.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Normalize missing spans to the sentinel Span() so downstream tooling
		# can rely on a structured object instead of None.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()


def error(code: ErrorCode, span: Span | None, *args: Any, phase: str = "bind") -> Diagnostic:
	"""Build an error diagnostic for `code`, formatting its message with `args`."""
	return Diagnostic(
		message=_MESSAGES[code].format(*args),
		code=code.value,
		phase=phase,
		severity="error",
		span=span or Span(),
	)


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Diagnostic", "ErrorCode", "error", "has_errors"]
