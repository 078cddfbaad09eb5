# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
anonc command-line driver.

Parses a source file, declares its types/globals/functions, binds every
member body and reports the anonymous object creations found together with
their synthesized types. Diagnostics go to stderr as
`file:line:col: severity: message`, or into a single JSON document with
`--json`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List

from anonc.binder.bound_nodes import BoundAnonymousObjectCreation, walk
from anonc.binder.expr_binder import BindOptions
from anonc.compilation import BoundMember, Compilation
from anonc.core.diagnostics import Diagnostic, has_errors
from anonc.core.types_core import TypeTable
from anonc.parser import parse_source_file

logger = logging.getLogger(__name__)

_NULLABLE_CHOICES = {"enable": True, "disable": False}


def _diag_to_json(diag: Diagnostic, phase: str, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	span = diag.span
	return {
		"phase": diag.phase or phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": span.file or str(source),
		"line": span.line,
		"column": span.column,
		"notes": list(diag.notes),
	}


def _print_diag(diag: Diagnostic, source: Path) -> None:
	loc = f"{diag.span.line if diag.span.line is not None else '?'}:{diag.span.column if diag.span.column is not None else '?'}"
	code = f" [{diag.code}]" if diag.code else ""
	print(f"{diag.span.file or source}:{loc}: {diag.severity}: {diag.message}{code}", file=sys.stderr)


def _creations(members: List[BoundMember]) -> List[tuple[BoundMember, BoundAnonymousObjectCreation]]:
	found = []

	def _visit(member: BoundMember) -> None:
		for expr in member.expressions:
			for node in walk(expr):
				if isinstance(node, BoundAnonymousObjectCreation):
					found.append((member, node))
		for local in member.locals:
			_visit(local)

	for member in members:
		_visit(member)
	return found


def _creation_to_json(member: BoundMember, node: BoundAnonymousObjectCreation, table: TypeTable) -> dict[str, Any]:
	return {
		"member": member.containing_member.name,
		"line": node.syntax.new_loc.line,
		"column": node.syntax.new_loc.column,
		"type": node.anonymous_type.name,
		"display": table.display(node.type),
		"has_errors": node.has_errors,
		"fields": [
			{
				"name": f.name,
				"type": table.display(f.type_id),
				"nullable": f.nullable_annotation.value,
				"line": f.span.line,
				"column": f.span.column,
			}
			for f in node.fields
		],
		"declarations": [d.property.name for d in node.declarations],
	}


def main(argv: list[str] | None = None) -> int:
	"""
	Parse, declare and bind one source file.

	Exit code is 1 when any error diagnostic was reported, else 0.
	"""
	parser = argparse.ArgumentParser(prog="anonc", description="bind anonymous object creation expressions")
	parser.add_argument("source", type=Path, help="Path to the source file")
	parser.add_argument(
		"--nullable",
		choices=sorted(_NULLABLE_CHOICES),
		default=None,
		help="Nullable reference types feature state (default: unspecified)",
	)
	parser.add_argument("-j", "--jobs", type=int, default=1, help="Bind members on this many worker threads")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics and bound creations as JSON",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)

	source_path: Path = args.source
	if not source_path.exists():
		parser.error(f"source file not found: {source_path}")

	program, parse_diags = parse_source_file(source_path)
	if program is None:
		if args.json:
			payload = {
				"exit_code": 1,
				"diagnostics": [_diag_to_json(d, "parser", source_path) for d in parse_diags],
			}
			print(json.dumps(payload))
		else:
			for d in parse_diags:
				_print_diag(d, source_path)
		return 1

	options = BindOptions(nullable=_NULLABLE_CHOICES.get(args.nullable))
	compilation = Compilation(program, options=options, file=str(source_path))
	result = compilation.bind_all(jobs=max(1, args.jobs))
	diagnostics = [*compilation.declaration_diagnostics, *result.diagnostics]
	exit_code = 1 if has_errors(diagnostics) else 0
	table = compilation.type_table
	creations = _creations(result.members)
	logger.debug("bound %d member(s), %d creation(s)", len(result.members), len(creations))

	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [_diag_to_json(d, "bind", source_path) for d in diagnostics],
			"anonymous_types": [
				{
					"name": sym.name,
					"display": table.display(sym.type_id),
					"properties": [{"name": p.name, "type": table.display(p.type_id)} for p in sym.properties],
				}
				for sym in compilation.anonymous_types.symbols()
			],
			"creations": [_creation_to_json(member, node, table) for member, node in creations],
		}
		print(json.dumps(payload))
		return exit_code

	for member, node in creations:
		loc = node.syntax.new_loc
		print(f"{member.containing_member.name} @{loc.line}:{loc.column}: {node.anonymous_type.name} {table.display(node.type)}")
		for i, f in enumerate(node.fields):
			print(f"  [{i}] {f.name}: {table.display(f.type_id)} ({f.nullable_annotation.value})")
	for d in diagnostics:
		_print_diag(d, source_path)
	return exit_code


if __name__ == "__main__":
	sys.exit(main())
