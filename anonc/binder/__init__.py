# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
anonc.binder: semantic binding of parsed expressions.

Modules:
  - symbols: declared globals/functions and the containing-member description
  - anonymous_types: structural interning of anonymous types
  - bound_nodes: the bound tree
  - name_inference: member names for `new { p.Name }`-style declarators
  - anonymous_creation: binding of anonymous object creation expressions
  - expr_binder: general expression binding
"""

from .anonymous_types import AnonymousTypeField, AnonymousTypeRegistry, AnonymousTypeSymbol, NullableAnnotation
from .bound_nodes import BoundAnonymousObjectCreation, BoundExpression
from .expr_binder import BindOptions, Binder
from .symbols import ContainingMember, MemberKind, SymbolTable

__all__ = [
	"AnonymousTypeField",
	"AnonymousTypeRegistry",
	"AnonymousTypeSymbol",
	"NullableAnnotation",
	"BoundAnonymousObjectCreation",
	"BoundExpression",
	"BindOptions",
	"Binder",
	"ContainingMember",
	"MemberKind",
	"SymbolTable",
]
