# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type core shared by the declaration pass and the binder.

TypeIds are opaque ints indexing into a TypeTable. TypeKind keeps the universe
small: value types, class (reference) types, void, pointers, restricted
stack-only types, nullable value types, anonymous types and error types.

A single TypeTable is shared by every binder of a compilation and members may
be bound on worker threads, so every operation that allocates a TypeId runs
under the table lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Sequence


TypeId = int  # opaque handle into the TypeTable


class TypeKind(Enum):
	"""Kinds of types understood by the type core."""

	VALUE = auto()
	CLASS = auto()
	VOID = auto()
	POINTER = auto()
	RESTRICTED = auto()
	NULLABLE = auto()
	ANONYMOUS = auto()
	ERROR = auto()


@dataclass(frozen=True)
class TypeDef:
	"""Definition of a type stored in the TypeTable."""

	kind: TypeKind
	name: str
	param_types: List[TypeId]


@dataclass(frozen=True)
class FieldSchema:
	"""A declared field of a class or struct."""

	name: str
	type_id: TypeId
	is_static: bool = False


class TypeTable:
	"""
	Type table that owns TypeIds.

	Builtins are seeded lazily through the `ensure_*` helpers; user-declared
	classes and structs are registered with `declare_class`/`declare_struct`
	and get their field schemas through `define_fields`.
	"""

	def __init__(self) -> None:
		self._lock = threading.RLock()
		self._defs: Dict[TypeId, TypeDef] = {}
		self._next_id: TypeId = 1  # reserve 0 for "invalid"
		self._named: Dict[str, TypeId] = {}
		self._fields: Dict[TypeId, List[FieldSchema]] = {}
		self._pointer_cache: Dict[TypeId, TypeId] = {}
		self._nullable_cache: Dict[TypeId, TypeId] = {}
		self._error_cache: Dict[str, TypeId] = {}

	# Builtins

	def ensure_int(self) -> TypeId:
		"""Return a stable int TypeId, creating it once."""
		return self._ensure_named(TypeKind.VALUE, "int")

	def ensure_bool(self) -> TypeId:
		"""Return a stable bool TypeId, creating it once."""
		return self._ensure_named(TypeKind.VALUE, "bool")

	def ensure_string(self) -> TypeId:
		"""Return a stable string TypeId, creating it once."""
		return self._ensure_named(TypeKind.CLASS, "string")

	def ensure_object(self) -> TypeId:
		"""Return a stable object TypeId, creating it once."""
		return self._ensure_named(TypeKind.CLASS, "object")

	def ensure_void(self) -> TypeId:
		"""Return the canonical void TypeId."""
		return self._ensure_named(TypeKind.VOID, "void")

	def ensure_builtins(self) -> None:
		"""Seed every builtin so name lookups see them."""
		self.ensure_int()
		self.ensure_bool()
		self.ensure_string()
		self.ensure_object()
		self.ensure_void()

	def ensure_error(self, name: str = "error") -> TypeId:
		"""
		Return the error type named `name`, creating it once.

		Error types are cached by name so two erroneous fields of the same
		shape produce the same anonymous type key.
		"""
		with self._lock:
			ty = self._error_cache.get(name)
			if ty is None:
				ty = self._add(TypeKind.ERROR, name, [])
				self._error_cache[name] = ty
			return ty

	# Declared types

	def declare_class(self, name: str) -> TypeId:
		"""Register a class (reference) type."""
		return self._declare(TypeKind.CLASS, name)

	def declare_struct(self, name: str, *, restricted: bool = False) -> TypeId:
		"""Register a struct; `restricted` marks a stack-only `ref struct`."""
		return self._declare(TypeKind.RESTRICTED if restricted else TypeKind.VALUE, name)

	def define_fields(self, ty: TypeId, fields: Sequence[FieldSchema]) -> None:
		"""Attach the field schema of a declared class or struct."""
		with self._lock:
			self._fields[ty] = list(fields)

	def fields_of(self, ty: TypeId) -> List[FieldSchema]:
		return list(self._fields.get(ty, []))

	def find_field(self, ty: TypeId, name: str, *, static: bool) -> Optional[FieldSchema]:
		"""Find the instance (or static) field `name` of type `ty`."""
		for schema in self._fields.get(ty, []):
			if schema.name == name and schema.is_static == static:
				return schema
		return None

	def lookup(self, name: str) -> Optional[TypeId]:
		"""Return the TypeId registered under a source-level type name."""
		return self._named.get(name)

	# Constructed types

	def new_pointer(self, inner: TypeId) -> TypeId:
		"""Return the pointer type `inner*`, creating it once."""
		with self._lock:
			ty = self._pointer_cache.get(inner)
			if ty is None:
				ty = self._add(TypeKind.POINTER, f"{self.get(inner).name}*", [inner])
				self._pointer_cache[inner] = ty
			return ty

	def new_nullable(self, inner: TypeId) -> TypeId:
		"""
		Return the lifted nullable type `inner?` for a value type.

		Types that already admit null (classes, anonymous types, nullables) are
		returned unchanged.
		"""
		if self.get(inner).kind is not TypeKind.VALUE:
			return inner
		with self._lock:
			ty = self._nullable_cache.get(inner)
			if ty is None:
				ty = self._add(TypeKind.NULLABLE, f"{self.get(inner).name}?", [inner])
				self._nullable_cache[inner] = ty
			return ty

	def new_anonymous(self, display_name: str, field_types: Sequence[TypeId]) -> TypeId:
		"""
		Register an anonymous type.

		No caching here: structural interning belongs to the anonymous type
		registry, which calls this once per distinct key.
		"""
		with self._lock:
			return self._add(TypeKind.ANONYMOUS, display_name, list(field_types))

	# Queries

	def get(self, ty: TypeId) -> TypeDef:
		"""Fetch the TypeDef for a given TypeId."""
		return self._defs[ty]

	def display(self, ty: TypeId) -> str:
		return self._defs[ty].name

	def is_void(self, ty: TypeId) -> bool:
		return self._defs[ty].kind is TypeKind.VOID

	def is_unsafe(self, ty: TypeId) -> bool:
		return self._defs[ty].kind is TypeKind.POINTER

	def is_restricted(self, ty: TypeId) -> bool:
		return self._defs[ty].kind is TypeKind.RESTRICTED

	def is_error(self, ty: TypeId) -> bool:
		return self._defs[ty].kind is TypeKind.ERROR

	def is_reference_type(self, ty: TypeId) -> bool:
		return self._defs[ty].kind in (TypeKind.CLASS, TypeKind.ANONYMOUS)

	def admits_null(self, ty: TypeId) -> bool:
		return self._defs[ty].kind in (TypeKind.CLASS, TypeKind.ANONYMOUS, TypeKind.NULLABLE)

	def __len__(self) -> int:
		return len(self._defs)

	def _ensure_named(self, kind: TypeKind, name: str) -> TypeId:
		with self._lock:
			ty = self._named.get(name)
			if ty is None:
				ty = self._add(kind, name, [])
				self._named[name] = ty
			return ty

	def _declare(self, kind: TypeKind, name: str) -> TypeId:
		with self._lock:
			if name in self._named:
				raise ValueError(f"type '{name}' is already declared")
			ty = self._add(kind, name, [])
			self._named[name] = ty
			return ty

	def _add(self, kind: TypeKind, name: str, params: List[TypeId]) -> TypeId:
		ty_id = self._next_id
		self._next_id += 1
		self._defs[ty_id] = TypeDef(kind=kind, name=name, param_types=list(params))
		return ty_id


__all__ = ["TypeId", "TypeKind", "TypeDef", "FieldSchema", "TypeTable"]
