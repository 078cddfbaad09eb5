# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lark-backed parser producing `anonc.parser.ast` nodes.

The grammar is LALR with a basic lexer; tree building is done by hand so the
AST keeps the shapes later passes rely on (left-nested qualified names and
right-nested conditional access chains).
"""

from __future__ import annotations

import codecs
from pathlib import Path
from typing import Callable, List, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from .ast import (
	AnonymousObjectCreation,
	Binary,
	Call,
	ConditionalAccess,
	Expr,
	FieldDecl,
	FieldInitializer,
	FunctionDecl,
	GlobalDecl,
	Identifier,
	Literal,
	Located,
	MemberAccess,
	MemberBinding,
	MemberDecl,
	MemberDeclKind,
	Name,
	NameEquals,
	ParamDecl,
	Parenthesized,
	Program,
	QualifiedName,
	TypeDecl,
	TypeDeclKind,
	TypeRef,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="program",
	propagate_positions=True,
	maybe_placeholders=False,
)

_EXPR_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="expr",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_program(source: str) -> Program:
	tree = _PARSER.parse(source)
	return _build_program(tree)


def parse_expr(source: str) -> Expr:
	"""Parse a single expression (used by tests and tooling)."""
	tree = _EXPR_PARSER.parse(source)
	return _build_expr(tree)


class BadStringLiteral(UnexpectedInput):
	"""A STRING token whose escapes do not decode."""

	def __init__(self, tok: Token, reason: str) -> None:
		super().__init__(f"invalid escape in string literal: {reason}")
		self.token = tok
		self.line = tok.line
		self.column = tok.column
		self.pos_in_stream = tok.start_pos


def _decode_string_token(tok: Token) -> str:
	"""Decode a STRING token body, interpreting Python-style escapes."""
	content = tok.value[1:-1]
	# Characters outside latin-1 are turned into `\u` escapes so the codec
	# sees bytes that map back to the same text.
	try:
		return codecs.decode(content.encode("latin-1", "backslashreplace"), "unicode_escape")
	except UnicodeError as err:
		raise BadStringLiteral(tok, err.reason) from err


def _build_program(tree: Tree) -> Program:
	program = Program()
	for child in tree.children:
		kind = _name(child)
		if kind in {"class_decl", "struct_decl", "ref_struct_decl"}:
			program.types.append(_build_type_decl(child))
		elif kind == "let_decl":
			program.globals.append(_build_let_decl(child))
		elif kind == "fn_decl":
			program.functions.append(_build_fn_decl(child))
		else:
			program.members.append(_build_member_decl(child))
	return program


_TYPE_DECL_KINDS = {
	"class_decl": TypeDeclKind.CLASS,
	"struct_decl": TypeDeclKind.STRUCT,
	"ref_struct_decl": TypeDeclKind.REF_STRUCT,
}


def _build_type_decl(tree: Tree) -> TypeDecl:
	name_tok = _first_token(tree, "NAME")
	fields = tuple(_build_field_decl(c) for c in _subtrees(tree, "field_decl"))
	return TypeDecl(loc=_loc(tree), kind=_TYPE_DECL_KINDS[_name(tree)], name=name_tok.value, fields=fields)


def _build_field_decl(tree: Tree) -> FieldDecl:
	is_static = any(isinstance(c, Token) and c.type == "STATIC" for c in tree.children)
	name_tok = _first_token(tree, "NAME")
	type_ref = _build_type_ref(next(_subtrees(tree, "type_ref")))
	return FieldDecl(loc=_loc_from_token(name_tok), name=name_tok.value, type_ref=type_ref, is_static=is_static)


def _build_let_decl(tree: Tree) -> GlobalDecl:
	name_tok = _first_token(tree, "NAME")
	type_ref = _build_type_ref(next(_subtrees(tree, "type_ref")))
	return GlobalDecl(loc=_loc_from_token(name_tok), name=name_tok.value, type_ref=type_ref)


def _build_fn_decl(tree: Tree) -> FunctionDecl:
	name_tok = _first_token(tree, "NAME")
	params: List[ParamDecl] = []
	for param in _subtrees(tree, "param"):
		param_name = _first_token(param, "NAME")
		params.append(ParamDecl(name=param_name.value, type_ref=_build_type_ref(next(_subtrees(param, "type_ref")))))
	# The return type is the only type_ref that is a direct child.
	return_type = _build_type_ref(next(_subtrees(tree, "type_ref")))
	return FunctionDecl(loc=_loc_from_token(name_tok), name=name_tok.value, params=tuple(params), return_type=return_type)


def _build_type_ref(tree: Tree) -> TypeRef:
	name_tok = _first_token(tree, "NAME")
	depth = sum(1 for c in tree.children if isinstance(c, Token) and c.type == "STAR")
	return TypeRef(loc=_loc_from_token(name_tok), name=name_tok.value, pointer_depth=depth)


_BODY_MEMBER_KINDS = {
	"method_decl": MemberDeclKind.METHOD,
	"script_decl": MemberDeclKind.SCRIPT,
	"type_member_decl": MemberDeclKind.TYPE,
	"local_decl": MemberDeclKind.LOCAL_FUNCTION,
}

_INITIALIZER_MEMBER_KINDS = {
	"field_member_decl": MemberDeclKind.FIELD,
	"const_member_decl": MemberDeclKind.CONST,
	"param_member_decl": MemberDeclKind.PARAM,
}


def _build_member_decl(tree: Tree) -> MemberDecl:
	kind = _name(tree)
	name_tok = _first_token(tree, "NAME", required=False)
	name = name_tok.value if name_tok is not None else "<script>"
	if kind in _INITIALIZER_MEMBER_KINDS:
		value = next(c for c in tree.children if not isinstance(c, Token))
		return MemberDecl(loc=_loc(tree), kind=_INITIALIZER_MEMBER_KINDS[kind], name=name, exprs=(_build_expr(value),))
	exprs: List[Expr] = []
	locals_: List[MemberDecl] = []
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		if _name(child) == "expr_stmt":
			exprs.append(_build_expr(child.children[0]))
		elif _name(child) == "local_decl":
			locals_.append(_build_member_decl(child))
	return MemberDecl(
		loc=_loc(tree),
		kind=_BODY_MEMBER_KINDS[kind],
		name=name,
		exprs=tuple(exprs),
		locals=tuple(locals_),
	)


def _build_expr(node: Tree | Token) -> Expr:
	if isinstance(node, Token):
		# `?primary` inlines nothing that is a bare token, but keep NAME robust.
		if node.type == "NAME":
			return _name_expr(node)
		raise TypeError(f"unexpected token in expression: {node.type}")
	kind = _name(node)
	loc = _loc(node)
	if kind == "name":
		return _name_expr(node.children[0])
	if kind == "qualified_name":
		names = [_name_expr(tok) for tok in node.children if isinstance(tok, Token) and tok.type == "NAME"]
		left: Name | QualifiedName = names[0]
		for right in names[1:]:
			left = QualifiedName(loc=loc, left=left, right=right)
		return left
	if kind == "int_lit":
		return Literal(loc=loc, kind="int", value=int(node.children[0].value))
	if kind == "string_lit":
		return Literal(loc=loc, kind="string", value=_decode_string_token(node.children[0]))
	if kind == "true_lit":
		return Literal(loc=loc, kind="bool", value=True)
	if kind == "false_lit":
		return Literal(loc=loc, kind="bool", value=False)
	if kind == "null_lit":
		return Literal(loc=loc, kind="null", value=None)
	if kind == "paren":
		return Parenthesized(loc=loc, inner=_build_expr(node.children[0]))
	if kind == "binary":
		left_node, op_tok, right_node = node.children
		return Binary(loc=loc, op=op_tok.value, left=_build_expr(left_node), right=_build_expr(right_node))
	if kind == "member_access":
		target = _build_expr(node.children[0])
		member = _name_expr(node.children[1])
		return _extend_chain(target, lambda t: MemberAccess(loc=t.loc, target=t, name=member))
	if kind == "conditional_member":
		target = _build_expr(node.children[0])
		member = _name_expr(node.children[1])
		binding = MemberBinding(loc=member.loc, name=member)
		return _extend_chain(target, lambda t: ConditionalAccess(loc=t.loc, target=t, when_not_null=binding))
	if kind == "call":
		func = _build_expr(node.children[0])
		args = tuple(_build_expr(c) for c in node.children[1:])
		return _extend_chain(func, lambda t: Call(loc=t.loc, func=t, args=args))
	if kind == "anon_creation":
		return _build_anon_creation(node)
	raise TypeError(f"unsupported expression node: {kind}")


def _extend_chain(target: Expr, make: Callable[[Expr], Expr]) -> Expr:
	"""
	Apply a postfix operation to `target`.

	A postfix operation following a conditional access belongs to its
	when-not-null part (`a?.b.c` only evaluates `.c` when `a` is not null), so
	the operation is pushed down to the innermost when-not-null expression.
	"""
	if isinstance(target, ConditionalAccess):
		return ConditionalAccess(
			loc=target.loc,
			target=target.target,
			when_not_null=_extend_chain(target.when_not_null, make),
		)
	return make(target)


def _build_anon_creation(tree: Tree) -> AnonymousObjectCreation:
	new_tok = _first_token(tree, "NEW")
	initializers: List[FieldInitializer] = []
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "named_initializer":
			name = _name_expr(child.children[0])
			initializers.append(
				FieldInitializer(
					loc=_loc(child),
					name_equals=NameEquals(loc=name.loc, name=name),
					expression=_build_expr(child.children[1]),
				)
			)
		elif kind == "implicit_initializer":
			initializers.append(FieldInitializer(loc=_loc(child), name_equals=None, expression=_build_expr(child.children[0])))
	return AnonymousObjectCreation(loc=_loc(tree), new_loc=_loc_from_token(new_tok), initializers=tuple(initializers))


def _name_expr(tok: Token) -> Name:
	loc = _loc_from_token(tok)
	return Name(loc=loc, ident=Identifier(text=tok.value, loc=loc))


def _first_token(tree: Tree, token_type: str, *, required: bool = True) -> Optional[Token]:
	tok = next((c for c in tree.children if isinstance(c, Token) and c.type == token_type), None)
	if tok is None and required:
		raise TypeError(f"{_name(tree)} node missing {token_type} token")
	return tok


def _subtrees(tree: Tree, name: str):
	return (c for c in tree.children if isinstance(c, Tree) and _name(c) == name)


def _loc(tree: Tree) -> Located:
	meta = tree.meta
	return Located(line=meta.line, column=meta.column)


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line, column=token.column)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["BadStringLiteral", "parse_program", "parse_expr"]
