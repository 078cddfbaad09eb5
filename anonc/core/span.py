# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span representation shared by the parser, binder and diagnostics.

A Span carries best-effort file/line/column info plus the parser object it
was built from (`raw`), so renderers can recover richer data when available.
`Span()` is the sentinel for "unknown location".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	# Excluded from equality so spans built from different parser objects for
	# the same position compare equal.
	raw: Any = field(default=None, compare=False, hash=False)

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from an existing parser/location object.

		If `loc` is already a Span, it is returned unchanged (with `file`
		filled in when it was missing); otherwise the parser-specific object is
		stored in `raw`.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			if file is not None and loc.file is None:
				return cls(
					file=file,
					line=loc.line,
					column=loc.column,
					end_line=loc.end_line,
					end_column=loc.end_column,
					raw=loc.raw,
				)
			return loc
		return cls(
			file=getattr(loc, "file", None) or getattr(loc, "filename", None) or file,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=loc,
		)

	@property
	def is_unknown(self) -> bool:
		return self.line is None

	def __str__(self) -> str:
		line = "?" if self.line is None else self.line
		column = "?" if self.column is None else self.column
		if self.file:
			return f"{self.file}:{line}:{column}"
		return f"{line}:{column}"


__all__ = ["Span"]
