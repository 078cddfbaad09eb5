# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser front door.

`parse_source`/`parse_source_file` collect parse failures as parser-phase
diagnostics instead of throwing, so the driver can report them alongside
later phases.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from lark.exceptions import UnexpectedInput

from anonc.core.diagnostics import Diagnostic
from anonc.core.span import Span

from . import ast
from .parser import parse_expr, parse_program


def parse_source(source: str, *, file: Optional[str] = None) -> Tuple[Optional[ast.Program], List[Diagnostic]]:
	"""Parse `source`; on failure return `(None, [diagnostic])`."""
	try:
		return parse_program(source), []
	except UnexpectedInput as err:
		span = Span(
			file=file,
			line=getattr(err, "line", None),
			column=getattr(err, "column", None),
			raw=err,
		)
		return None, [Diagnostic(message=_describe(err), phase="parser", severity="error", span=span)]


def parse_source_file(path: Path) -> Tuple[Optional[ast.Program], List[Diagnostic]]:
	"""Read `path` as UTF-8 and parse it; undecodable bytes become a parser diagnostic."""
	data = path.read_bytes()
	try:
		source = data.decode("utf-8")
	except UnicodeDecodeError as err:
		# Line and column of the offending byte (columns count bytes).
		line_start = data.rfind(b"\n", 0, err.start) + 1
		span = Span(
			file=str(path),
			line=data.count(b"\n", 0, err.start) + 1,
			column=err.start - line_start + 1,
			raw=err,
		)
		message = f"source is not valid UTF-8: cannot decode byte 0x{data[err.start]:02x} at offset {err.start}"
		return None, [Diagnostic(message=message, phase="parser", severity="error", span=span)]
	return parse_source(source, file=str(path))


def _describe(err: UnexpectedInput) -> str:
	# Lark messages span several lines (context excerpt); keep the first.
	text = str(err).strip()
	return text.splitlines()[0] if text else "syntax error"


__all__ = ["ast", "parse_expr", "parse_program", "parse_source", "parse_source_file"]
