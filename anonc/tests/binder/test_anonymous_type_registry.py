# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from anonc.binder.anonymous_types import (
	AnonymousTypeField,
	AnonymousTypeRegistry,
	NullableAnnotation,
	SymbolKind,
)
from anonc.core.span import Span
from anonc.core.types_core import TypeKind, TypeTable


def _field(name: str, ty: int, line: int = 1, annotation=NullableAnnotation.UNKNOWN) -> AnonymousTypeField:
	return AnonymousTypeField(name=name, span=Span(line=line, column=1), type_id=ty, nullable_annotation=annotation)


@pytest.fixture
def table() -> TypeTable:
	table = TypeTable()
	table.ensure_builtins()
	return table


def test_identical_keys_share_one_symbol(table: TypeTable):
	registry = AnonymousTypeRegistry(table)
	int_ty = table.ensure_int()

	first = registry.intern([_field("x", int_ty, line=1)], Span(line=1, column=1))
	# Spans and annotations are not part of the key.
	second = registry.intern(
		[_field("x", int_ty, line=9, annotation=NullableAnnotation.NOT_ANNOTATED)],
		Span(line=9, column=1),
	)

	assert first is second
	assert first.span.line == 1
	assert len(registry) == 1


def test_field_types_and_order_distinguish_symbols_but_names_share_templates(table: TypeTable):
	registry = AnonymousTypeRegistry(table)
	int_ty = table.ensure_int()
	string_ty = table.ensure_string()

	xi = registry.intern([_field("x", int_ty)], Span())
	xs = registry.intern([_field("x", string_ty)], Span())
	xy = registry.intern([_field("x", int_ty), _field("y", int_ty)], Span())
	yx = registry.intern([_field("y", int_ty), _field("x", int_ty)], Span())

	assert len({id(s) for s in (xi, xs, xy, yx)}) == 4
	assert xi.template is xs.template
	assert [t.metadata_name for t in registry.templates()] == [
		"<>f__AnonymousType0",
		"<>f__AnonymousType1",
		"<>f__AnonymousType2",
	]
	assert xi.name == "<>f__AnonymousType0"
	assert yx.name == "<>f__AnonymousType2"
	assert yx.template.type_parameters == ("<y>j__TPar", "<x>j__TPar")
	assert [s.name for s in registry.symbols()] == [xi.name, xs.name, xy.name, yx.name]


def test_symbol_is_registered_as_an_anonymous_reference_type(table: TypeTable):
	registry = AnonymousTypeRegistry(table)
	int_ty = table.ensure_int()
	string_ty = table.ensure_string()

	sym = registry.intern([_field("x", int_ty), _field("y", string_ty)], Span())

	td = table.get(sym.type_id)
	assert td.kind is TypeKind.ANONYMOUS
	assert td.param_types == [int_ty, string_ty]
	assert table.display(sym.type_id) == "<anonymous type: int x, string y>"
	assert table.is_reference_type(sym.type_id)
	assert sym.key == (("x", int_ty), ("y", string_ty))


def test_members_follow_field_order(table: TypeTable):
	registry = AnonymousTypeRegistry(table)
	int_ty = table.ensure_int()
	string_ty = table.ensure_string()

	sym = registry.intern([_field("b", string_ty), _field("a", int_ty)], Span())

	assert [(p.name, p.index, p.type_id) for p in sym.properties] == [("b", 0, string_ty), ("a", 1, int_ty)]
	assert all(p.owner == sym.type_id for p in sym.properties)
	(ctor,) = sym.instance_constructors
	assert ctor.name == ".ctor"
	assert ctor.param_types == (string_ty, int_ty)
	assert [m.name for m in sym.methods] == ["Equals", "GetHashCode", "ToString"]
	assert [m.kind for m in sym.members][:3] == [SymbolKind.CONSTRUCTOR, SymbolKind.PROPERTY, SymbolKind.PROPERTY]


def test_property_may_share_its_name_with_a_method(table: TypeTable):
	registry = AnonymousTypeRegistry(table)

	sym = registry.intern([_field("ToString", table.ensure_int())], Span())

	kinds = [m.kind for m in sym.get_members("ToString")]
	assert kinds == [SymbolKind.PROPERTY, SymbolKind.METHOD]
	assert sym.get_members("Missing") == []


def test_empty_anonymous_type(table: TypeTable):
	registry = AnonymousTypeRegistry(table)

	sym = registry.intern([], Span())

	assert sym.properties == ()
	assert sym.instance_constructors[0].param_types == ()
	assert table.display(sym.type_id) == "<empty anonymous type>"
	assert registry.intern((), Span()) is sym


def test_unknown_type_ids_are_rejected(table: TypeTable):
	registry = AnonymousTypeRegistry(table)

	with pytest.raises(KeyError):
		registry.intern([_field("x", 10_000)], Span())
	assert len(registry) == 0


def test_concurrent_interning_creates_each_type_once(table: TypeTable):
	registry = AnonymousTypeRegistry(table)
	int_ty = table.ensure_int()
	string_ty = table.ensure_string()
	shapes = [
		[_field("x", int_ty)],
		[_field("x", string_ty)],
		[_field("x", int_ty), _field("y", int_ty)],
	]

	with ThreadPoolExecutor(max_workers=8) as pool:
		results = list(pool.map(lambda i: registry.intern(shapes[i % 3], Span()), range(90)))

	assert len(registry) == 3
	assert len(registry.templates()) == 2
	for i, sym in enumerate(results):
		assert sym is results[i % 3]
