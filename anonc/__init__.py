# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
anonc: binder for anonymous object creation expressions.

Pipeline:
  source -> parser (lark) -> declarations (TypeTable, symbols)
         -> binder (per member) -> bound tree + diagnostics

The CLI entrypoint is `anonc.driver:main`.
"""

__all__ = ["core", "parser", "binder", "compilation", "driver"]
