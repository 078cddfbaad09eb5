# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
anonc.core: shared span/diagnostic/type primitives used across the front end.

Modules:
  - span: source spans
  - diagnostics: Diagnostic record and stable error codes
  - types_core: TypeId/TypeTable primitives
"""

__all__ = [
	"span",
	"diagnostics",
	"types_core",
]
