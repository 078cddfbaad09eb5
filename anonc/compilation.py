# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compilation: declarations plus binding of every member body.

A Compilation owns the state shared by all binders (TypeTable, anonymous type
registry, symbol table). `bind_all` binds members either sequentially or on a
thread pool; results and diagnostics are always returned in declaration
order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from anonc.binder.anonymous_types import AnonymousTypeRegistry
from anonc.binder.bound_nodes import BoundExpression
from anonc.binder.expr_binder import BindOptions, Binder
from anonc.binder.symbols import ContainingMember, FunctionSymbol, GlobalSymbol, MemberKind, SymbolTable
from anonc.core.diagnostics import Diagnostic, ErrorCode, error
from anonc.core.span import Span
from anonc.core.types_core import FieldSchema, TypeId, TypeTable
from anonc.parser import ast

logger = logging.getLogger(__name__)


@dataclass
class BoundMember:
	"""Bound expressions of one member (and of its local functions)."""

	decl: ast.MemberDecl
	containing_member: ContainingMember
	expressions: List[BoundExpression] = field(default_factory=list)
	locals: List["BoundMember"] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	def all_expressions(self) -> List[BoundExpression]:
		out = list(self.expressions)
		for local in self.locals:
			out.extend(local.all_expressions())
		return out


@dataclass
class BindResult:
	members: List[BoundMember]
	diagnostics: List[Diagnostic]


_CONTAINING_MEMBER_KINDS = {
	ast.MemberDeclKind.METHOD: MemberKind.METHOD,
	ast.MemberDeclKind.LOCAL_FUNCTION: MemberKind.LOCAL_FUNCTION,
	ast.MemberDeclKind.FIELD: MemberKind.FIELD,
	ast.MemberDeclKind.CONST: MemberKind.FIELD,
	ast.MemberDeclKind.PARAM: MemberKind.PARAMETER,
	ast.MemberDeclKind.SCRIPT: MemberKind.NAMED_TYPE,
	ast.MemberDeclKind.TYPE: MemberKind.NAMED_TYPE,
}


def containing_member_for(decl: ast.MemberDecl) -> ContainingMember:
	return ContainingMember(
		kind=_CONTAINING_MEMBER_KINDS[decl.kind],
		name=decl.name,
		is_const=decl.kind is ast.MemberDeclKind.CONST,
		is_script_class=decl.kind is ast.MemberDeclKind.SCRIPT,
	)


class Compilation:
	def __init__(self, program: ast.Program, *, options: BindOptions = BindOptions(), file: Optional[str] = None) -> None:
		self.program = program
		self.options = options
		self.file = file
		self.type_table = TypeTable()
		self.type_table.ensure_builtins()
		self.anonymous_types = AnonymousTypeRegistry(self.type_table)
		self.symbols = SymbolTable()
		self.declaration_diagnostics: List[Diagnostic] = []
		self._declare()

	def binder_for(self, containing_member: Optional[ContainingMember]) -> Binder:
		return Binder(
			type_table=self.type_table,
			registry=self.anonymous_types,
			symbols=self.symbols,
			containing_member=containing_member,
			options=self.options,
			file=self.file,
		)

	def bind_member(self, decl: ast.MemberDecl) -> BoundMember:
		member = containing_member_for(decl)
		logger.debug("binding %s %s", member.kind.name.lower(), member.name)
		binder = self.binder_for(member)
		bound = BoundMember(decl=decl, containing_member=member)
		for expr in decl.exprs:
			bound.expressions.append(binder.bind_value(expr, bound.diagnostics))
		for local in decl.locals:
			bound.locals.append(self.bind_member(local))
		return bound

	def bind_all(self, jobs: int = 1) -> BindResult:
		"""
		Bind every member.

		With `jobs > 1` members are bound concurrently; the result order (and
		thus diagnostic order) still follows the source.
		"""
		decls = list(self.program.members)
		if jobs > 1 and len(decls) > 1:
			with ThreadPoolExecutor(max_workers=jobs) as pool:
				members = list(pool.map(self.bind_member, decls))
		else:
			members = [self.bind_member(d) for d in decls]
		diagnostics: List[Diagnostic] = []
		for member in members:
			diagnostics.extend(_member_diagnostics(member))
		return BindResult(members=members, diagnostics=diagnostics)

	def _span(self, loc: Optional[ast.Located]) -> Span:
		return Span.from_loc(loc, file=self.file)

	def _declare(self) -> None:
		table = self.type_table
		declared: List[tuple[ast.TypeDecl, TypeId]] = []
		for decl in self.program.types:
			if table.lookup(decl.name) is not None:
				self._declaration_error(ErrorCode.DUPLICATE_DECLARATION, decl.loc, decl.name)
				continue
			if decl.kind is ast.TypeDeclKind.CLASS:
				ty = table.declare_class(decl.name)
			else:
				ty = table.declare_struct(decl.name, restricted=decl.kind is ast.TypeDeclKind.REF_STRUCT)
			declared.append((decl, ty))
		# Fields may refer to any declared type, so resolve them after all
		# names are known.
		for decl, ty in declared:
			fields: List[FieldSchema] = []
			seen: set[str] = set()
			for fd in decl.fields:
				if fd.name in seen:
					self._declaration_error(ErrorCode.DUPLICATE_DECLARATION, fd.loc, f"{decl.name}.{fd.name}")
					continue
				seen.add(fd.name)
				fields.append(FieldSchema(name=fd.name, type_id=self._resolve_type(fd.type_ref), is_static=fd.is_static))
			table.define_fields(ty, fields)

		for glob in self.program.globals:
			if self.symbols.is_declared(glob.name):
				self._declaration_error(ErrorCode.DUPLICATE_DECLARATION, glob.loc, glob.name)
				continue
			self.symbols.globals[glob.name] = GlobalSymbol(
				name=glob.name,
				type_id=self._resolve_type(glob.type_ref),
				span=self._span(glob.loc),
			)
		for fn in self.program.functions:
			if self.symbols.is_declared(fn.name):
				self._declaration_error(ErrorCode.DUPLICATE_DECLARATION, fn.loc, fn.name)
				continue
			self.symbols.functions[fn.name] = FunctionSymbol(
				name=fn.name,
				param_types=tuple(self._resolve_type(p.type_ref) for p in fn.params),
				return_type=self._resolve_type(fn.return_type),
				span=self._span(fn.loc),
			)

	def _resolve_type(self, ref: ast.TypeRef) -> TypeId:
		table = self.type_table
		ty = table.lookup(ref.name)
		if ty is None:
			self._declaration_error(ErrorCode.UNKNOWN_TYPE, ref.loc, ref.name)
			return table.ensure_error(ref.name)
		for _ in range(ref.pointer_depth):
			ty = table.new_pointer(ty)
		return ty

	def _declaration_error(self, code: ErrorCode, loc: ast.Located, *args: object) -> None:
		self.declaration_diagnostics.append(error(code, self._span(loc), *args, phase="declare"))


def _member_diagnostics(member: BoundMember) -> List[Diagnostic]:
	out = list(member.diagnostics)
	for local in member.locals:
		out.extend(_member_diagnostics(local))
	return out


__all__ = ["BoundMember", "BindResult", "Compilation", "containing_member_for"]
