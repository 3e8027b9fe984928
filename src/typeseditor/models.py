"""Data models for the types.xml editor.

A ``<type>`` element is flattened into an ordered list of :class:`Field`
records.  Each field is addressed by a key that is either the text of a
child element (:class:`ElementKey`) or one attribute of a child element
(:class:`AttributeKey`).  The ``(element, index)`` pair shared by both key
kinds is the *group key* used to rebuild the XML element on save.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Union


@dataclass(frozen=True)
class ElementKey:
    """Text content of the ``index``-th child element called ``name``."""

    name: str
    index: int = 0

    @property
    def element(self) -> str:
        return self.name

    @property
    def group_key(self) -> tuple[str, int]:
        return (self.name, self.index)

    def renamed(self, new_name: str) -> ElementKey:
        return replace(self, name=new_name)

    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class AttributeKey:
    """Attribute ``attr`` on the ``index``-th child element called ``element``."""

    element: str
    index: int
    attr: str

    @property
    def group_key(self) -> tuple[str, int]:
        return (self.element, self.index)

    def renamed(self, new_name: str) -> AttributeKey:
        return replace(self, attr=new_name)

    def label(self) -> str:
        return f"{self.element} @{self.attr}"


FieldKey = Union[ElementKey, AttributeKey]


@dataclass
class Field:
    """One editable value inside a type."""

    key: FieldKey
    value: str = ""

    def copy(self) -> Field:
        # Keys are frozen, so sharing them between copies is safe.
        return Field(self.key, self.value)


@dataclass
class TypeEntry:
    """One ``<type name="...">`` element."""

    name: str = ""
    fields: list[Field] = field(default_factory=list)

    def clone(self) -> TypeEntry:
        return TypeEntry(self.name, [f.copy() for f in self.fields])

    def element_count(self, name: str) -> int:
        """Number of element-text fields named *name* (next free index)."""
        return sum(
            1 for f in self.fields
            if isinstance(f.key, ElementKey) and f.key.name == name
        )

    def find_field(self, key: FieldKey) -> int | None:
        """Position of the first field whose key equals *key*."""
        for pos, f in enumerate(self.fields):
            if f.key == key:
                return pos
        return None


@dataclass
class TypesDocument:
    """In-memory representation of a ``<types>`` file.

    The primitives below assume valid indices; the editor keeps the
    selection and key invariants.
    """

    types: list[TypeEntry] = field(default_factory=list)

    def clone(self) -> TypesDocument:
        return TypesDocument([t.clone() for t in self.types])

    # ── Type access helpers ─────────────────────────────────────

    def type_count(self) -> int:
        return len(self.types)

    def field_count(self, type_index: int) -> int:
        return len(self.types[type_index].fields)

    def get_field(self, type_index: int, field_index: int) -> Field:
        return self.types[type_index].fields[field_index]

    # ── Structural operations ───────────────────────────────────

    def insert_type(self, entry: TypeEntry) -> None:
        self.types.append(entry)

    def remove_type(self, index: int) -> TypeEntry:
        return self.types.pop(index)

    def append_field(self, type_index: int, new_field: Field) -> None:
        self.types[type_index].fields.append(new_field)

    def remove_field(self, type_index: int, field_index: int) -> Field:
        return self.types[type_index].fields.pop(field_index)

    # ── Value edits ─────────────────────────────────────────────

    def rename_type(self, type_index: int, name: str) -> None:
        self.types[type_index].name = name

    def set_field_value(self, type_index: int, field_index: int, value: str) -> None:
        self.types[type_index].fields[field_index].value = value

    def set_field_key_name(self, type_index: int, field_index: int, name: str) -> None:
        """Rename an element key's ``name`` or an attribute key's ``attr``."""
        f = self.types[type_index].fields[field_index]
        f.key = f.key.renamed(name)


def default_fields() -> list[Field]:
    """Field template seeded into a type created with Add."""
    fields = [
        Field(ElementKey(name), "")
        for name in ("nominal", "lifetime", "restock", "min", "quantmin", "quantmax", "cost")
    ]
    flags = [
        ("count_in_cargo", "0"),
        ("count_in_hoarder", "0"),
        ("count_in_map", "1"),
        ("count_in_player", "0"),
        ("crafted", "0"),
        ("deloot", "0"),
    ]
    fields.extend(Field(AttributeKey("flags", 0, attr), value) for attr, value in flags)
    fields.append(Field(AttributeKey("category", 0, "name"), ""))
    return fields
