# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declared symbols visible to the binder.

This is the small slice of a symbol table the binder needs: globals and
function signatures by name, plus a description of the member whose body is
being bound (used to decide whether anonymous types are allowed there).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional, Tuple

from anonc.core.span import Span
from anonc.core.types_core import TypeId


class MemberKind(Enum):
	"""
	Kinds of members that can contain a bound expression.

	The surface language has no lambdas; LAMBDA is for hosts that bind lambda
	bodies with their own `ContainingMember`.
	"""

	METHOD = auto()
	LOCAL_FUNCTION = auto()
	LAMBDA = auto()
	FIELD = auto()
	NAMED_TYPE = auto()
	PARAMETER = auto()


@dataclass(frozen=True)
class ContainingMember:
	"""The member (or lambda) enclosing the expression being bound."""

	kind: MemberKind
	name: str
	is_const: bool = False  # fields only
	is_script_class: bool = False  # named types only


@dataclass(frozen=True)
class FunctionSymbol:
	name: str
	param_types: Tuple[TypeId, ...]
	return_type: TypeId
	span: Span = field(default_factory=Span)


@dataclass(frozen=True)
class GlobalSymbol:
	name: str
	type_id: TypeId
	span: Span = field(default_factory=Span)


@dataclass
class SymbolTable:
	globals: Dict[str, GlobalSymbol] = field(default_factory=dict)
	functions: Dict[str, FunctionSymbol] = field(default_factory=dict)

	def lookup_global(self, name: str) -> Optional[GlobalSymbol]:
		return self.globals.get(name)

	def lookup_function(self, name: str) -> Optional[FunctionSymbol]:
		return self.functions.get(name)

	def is_declared(self, name: str) -> bool:
		return name in self.globals or name in self.functions


__all__ = ["MemberKind", "ContainingMember", "FunctionSymbol", "GlobalSymbol", "SymbolTable"]
