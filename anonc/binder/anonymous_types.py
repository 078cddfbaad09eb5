# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Anonymous type registry.

One registry is shared by every binder of a compilation. It interns anonymous
types structurally:

- a *template* per ordered tuple of field names (`<>f__AnonymousType{n}`),
  numbered in the order templates are first requested;
- a *symbol* per ordered tuple of `(name, type)` pairs, built on the template
  for its names and registered in the TypeTable as an ANONYMOUS type.

Creation expressions with identical keys get the same symbol instance.
Binders may run on worker threads, so interning happens under a lock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Sequence, Tuple, Union

from anonc.core.span import Span
from anonc.core.types_core import TypeId, TypeTable

logger = logging.getLogger(__name__)


class NullableAnnotation(Enum):
	"""Whether a field's reference type is known to admit null."""

	ANNOTATED = "Annotated"
	NOT_ANNOTATED = "NotAnnotated"
	UNKNOWN = "Unknown"


@dataclass(frozen=True)
class AnonymousTypeField:
	"""Name/location/type of one field of an anonymous type being created."""

	name: str
	span: Span
	type_id: TypeId
	nullable_annotation: NullableAnnotation = NullableAnnotation.UNKNOWN


AnonymousTypeKey = Tuple[Tuple[str, TypeId], ...]


def anonymous_type_key(fields: Sequence[AnonymousTypeField]) -> AnonymousTypeKey:
	return tuple((f.name, f.type_id) for f in fields)


class SymbolKind(Enum):
	PROPERTY = auto()
	METHOD = auto()
	CONSTRUCTOR = auto()


@dataclass(frozen=True)
class AnonymousPropertySymbol:
	name: str
	index: int
	type_id: TypeId
	owner: TypeId
	kind: SymbolKind = SymbolKind.PROPERTY


@dataclass(frozen=True)
class AnonymousMethodSymbol:
	name: str
	param_types: Tuple[TypeId, ...]
	return_type: TypeId
	owner: TypeId
	kind: SymbolKind = SymbolKind.METHOD


@dataclass(frozen=True)
class AnonymousConstructorSymbol:
	param_types: Tuple[TypeId, ...]
	owner: TypeId
	name: str = ".ctor"
	kind: SymbolKind = SymbolKind.CONSTRUCTOR


AnonymousMember = Union[AnonymousPropertySymbol, AnonymousMethodSymbol, AnonymousConstructorSymbol]


@dataclass(frozen=True)
class AnonymousTypeTemplate:
	"""Generic shape shared by every anonymous type with the same field names."""

	index: int
	field_names: Tuple[str, ...]

	@property
	def metadata_name(self) -> str:
		return f"<>f__AnonymousType{self.index}"

	@property
	def type_parameters(self) -> Tuple[str, ...]:
		return tuple(f"<{name}>j__TPar" for name in self.field_names)


@dataclass(eq=False)
class AnonymousTypeSymbol:
	"""
	An interned anonymous type.

	`span` is the creation site that first requested the type. Members are
	fixed at construction: one property per field (in field order), one
	instance constructor taking the fields in order, and the synthesized
	Equals/GetHashCode/ToString overrides.
	"""

	template: AnonymousTypeTemplate
	type_id: TypeId
	span: Span
	properties: Tuple[AnonymousPropertySymbol, ...]
	instance_constructors: Tuple[AnonymousConstructorSymbol, ...]
	methods: Tuple[AnonymousMethodSymbol, ...]

	@property
	def name(self) -> str:
		return self.template.metadata_name

	@property
	def key(self) -> AnonymousTypeKey:
		return tuple((p.name, p.type_id) for p in self.properties)

	@property
	def members(self) -> Tuple[AnonymousMember, ...]:
		return (*self.instance_constructors, *self.properties, *self.methods)

	def get_members(self, name: str) -> List[AnonymousMember]:
		"""Every member called `name` (a property may share a name with a method)."""
		return [m for m in self.members if m.name == name]


class AnonymousTypeRegistry:
	"""Compilation-wide, thread-safe interning of anonymous types."""

	def __init__(self, type_table: TypeTable) -> None:
		self.type_table = type_table
		self._lock = threading.RLock()
		self._templates: Dict[Tuple[str, ...], AnonymousTypeTemplate] = {}
		self._symbols: Dict[AnonymousTypeKey, AnonymousTypeSymbol] = {}

	def intern(self, fields: Sequence[AnonymousTypeField], location: Span) -> AnonymousTypeSymbol:
		"""
		Return the anonymous type for the ordered `fields`, creating it once.

		Only names and types take part in the key; field spans and nullable
		annotations belong to the creation site, not to the type.
		"""
		key = anonymous_type_key(fields)
		with self._lock:
			existing = self._symbols.get(key)
			if existing is not None:
				logger.debug("anonymous type hit: %s for %s", existing.name, location)
				return existing
			symbol = self._create(key, location)
			self._symbols[key] = symbol
			logger.debug("anonymous type created: %s %s", symbol.name, self.type_table.display(symbol.type_id))
			return symbol

	def templates(self) -> List[AnonymousTypeTemplate]:
		with self._lock:
			return sorted(self._templates.values(), key=lambda t: t.index)

	def symbols(self) -> List[AnonymousTypeSymbol]:
		with self._lock:
			return sorted(self._symbols.values(), key=lambda s: s.type_id)

	def __len__(self) -> int:
		with self._lock:
			return len(self._symbols)

	def _template_for(self, names: Tuple[str, ...]) -> AnonymousTypeTemplate:
		template = self._templates.get(names)
		if template is None:
			template = AnonymousTypeTemplate(index=len(self._templates), field_names=names)
			self._templates[names] = template
		return template

	def _create(self, key: AnonymousTypeKey, location: Span) -> AnonymousTypeSymbol:
		table = self.type_table
		names = tuple(name for name, _ in key)
		types = tuple(ty for _, ty in key)
		for ty in types:
			# Fail loudly on handles from a different table.
			table.get(ty)
		template = self._template_for(names)
		type_id = table.new_anonymous(_display_name(table, key), types)
		properties = tuple(
			AnonymousPropertySymbol(name=name, index=i, type_id=ty, owner=type_id)
			for i, (name, ty) in enumerate(key)
		)
		ctor = AnonymousConstructorSymbol(param_types=types, owner=type_id)
		methods = (
			AnonymousMethodSymbol(name="Equals", param_types=(table.ensure_object(),), return_type=table.ensure_bool(), owner=type_id),
			AnonymousMethodSymbol(name="GetHashCode", param_types=(), return_type=table.ensure_int(), owner=type_id),
			AnonymousMethodSymbol(name="ToString", param_types=(), return_type=table.ensure_string(), owner=type_id),
		)
		return AnonymousTypeSymbol(
			template=template,
			type_id=type_id,
			span=location,
			properties=properties,
			instance_constructors=(ctor,),
			methods=methods,
		)


def _display_name(table: TypeTable, key: AnonymousTypeKey) -> str:
	if not key:
		return "<empty anonymous type>"
	parts = ", ".join(f"{table.display(ty)} {name}" for name, ty in key)
	return f"<anonymous type: {parts}>"


__all__ = [
	"NullableAnnotation",
	"AnonymousTypeField",
	"AnonymousTypeKey",
	"anonymous_type_key",
	"SymbolKind",
	"AnonymousPropertySymbol",
	"AnonymousMethodSymbol",
	"AnonymousConstructorSymbol",
	"AnonymousMember",
	"AnonymousTypeTemplate",
	"AnonymousTypeSymbol",
	"AnonymousTypeRegistry",
]
