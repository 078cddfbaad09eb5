# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from anonc.core.types_core import FieldSchema, TypeKind, TypeTable


def test_builtins_are_stable_and_classified():
	table = TypeTable()
	int_ty = table.ensure_int()

	assert int_ty == table.ensure_int()
	assert table.get(int_ty).kind is TypeKind.VALUE
	assert table.display(int_ty) == "int"
	assert not table.is_reference_type(int_ty)
	assert table.is_reference_type(table.ensure_string())
	assert table.is_reference_type(table.ensure_object())
	assert table.is_void(table.ensure_void())
	assert table.lookup("string") == table.ensure_string()


def test_error_types_are_cached_by_name():
	table = TypeTable()

	void_err = table.ensure_error("void")

	assert void_err == table.ensure_error("void")
	assert void_err != table.ensure_error()
	assert table.is_error(void_err)
	assert table.display(table.ensure_error()) == "error"
	# Error types are not source-level names.
	assert table.lookup("error") is None


def test_pointer_and_nullable_types_are_interned():
	table = TypeTable()
	int_ty = table.ensure_int()
	string_ty = table.ensure_string()

	ptr = table.new_pointer(int_ty)
	assert ptr == table.new_pointer(int_ty)
	assert table.display(ptr) == "int*"
	assert table.display(table.new_pointer(ptr)) == "int**"
	assert table.is_unsafe(ptr)
	assert not table.is_reference_type(ptr)

	opt = table.new_nullable(int_ty)
	assert opt == table.new_nullable(int_ty)
	assert table.get(opt).kind is TypeKind.NULLABLE
	assert table.get(opt).param_types == [int_ty]
	assert table.display(opt) == "int?"
	assert table.admits_null(opt)
	# Reference types already admit null and are not wrapped.
	assert table.new_nullable(string_ty) == string_ty
	assert table.new_nullable(opt) == opt


def test_declared_types_and_fields():
	table = TypeTable()
	table.ensure_builtins()
	person = table.declare_class("Person")
	point = table.declare_struct("Point")
	slice_ty = table.declare_struct("Slice", restricted=True)
	table.define_fields(
		person,
		[
			FieldSchema(name="Name", type_id=table.ensure_string()),
			FieldSchema(name="Count", type_id=table.ensure_int(), is_static=True),
		],
	)

	assert table.lookup("Person") == person
	assert table.is_reference_type(person)
	assert not table.is_reference_type(point)
	assert table.is_restricted(slice_ty)
	assert not table.admits_null(point)
	assert table.find_field(person, "Name", static=False).type_id == table.ensure_string()
	assert table.find_field(person, "Count", static=False) is None
	assert table.find_field(person, "Count", static=True) is not None
	assert [f.name for f in table.fields_of(person)] == ["Name", "Count"]
	assert table.fields_of(point) == []

	with pytest.raises(ValueError):
		table.declare_class("Person")


def test_anonymous_types_are_never_cached_by_the_table():
	table = TypeTable()
	int_ty = table.ensure_int()

	a = table.new_anonymous("<anonymous type: int x>", [int_ty])
	b = table.new_anonymous("<anonymous type: int x>", [int_ty])

	assert a != b
	assert table.is_reference_type(a)
	assert table.get(a).param_types == [int_ty]


def test_concurrent_interning_yields_one_type():
	table = TypeTable()
	int_ty = table.ensure_int()

	with ThreadPoolExecutor(max_workers=8) as pool:
		ids = list(pool.map(lambda _: table.new_pointer(int_ty), range(64)))

	assert len(set(ids)) == 1
