"""Type definitions for interface parsing and code generation."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin


class TypeKind(StrEnum):
    """Classification of a field type."""

    PRIMITIVE = auto()
    RECORD = auto()
    ENUM = auto()
    OBJECT = auto()
    OPTIONAL = auto()
    SEQUENCE = auto()
    MAP = auto()
    UNRESOLVED = auto()  # Named type not yet looked up by the parser


@dataclass(frozen=True)
class FfiType(DataClassJsonMixin):
    """Represents a primitive, user-defined or composite type.

    Named kinds (primitive, record, enum, object) carry a name.
    Composite kinds carry their type arguments in ``inner``:
    - optional: [value]
    - sequence: [item]
    - map: [key, value]
    """

    kind: TypeKind
    name: str | None = None
    inner: list["FfiType"] = field(default_factory=list)

    @classmethod
    def named(cls, name: str, kind: TypeKind = TypeKind.UNRESOLVED) -> "FfiType":
        return cls(kind=kind, name=name)

    @classmethod
    def primitive(cls, name: str) -> "FfiType":
        return cls(kind=TypeKind.PRIMITIVE, name=name)

    @classmethod
    def optional(cls, inner: "FfiType") -> "FfiType":
        return cls(kind=TypeKind.OPTIONAL, inner=[inner])

    @classmethod
    def sequence(cls, inner: "FfiType") -> "FfiType":
        return cls(kind=TypeKind.SEQUENCE, inner=[inner])

    @classmethod
    def map(cls, key: "FfiType", value: "FfiType") -> "FfiType":
        return cls(kind=TypeKind.MAP, inner=[key, value])

    @property
    def is_named(self) -> bool:
        return self.name is not None

    def iter_types(self) -> Iterator["FfiType"]:
        """Yield this type and every type nested inside it."""
        yield self
        for inner in self.inner:
            yield from inner.iter_types()

    def __str__(self) -> str:
        if self.kind == TypeKind.OPTIONAL:
            return f"{self.inner[0]}?"
        if self.kind == TypeKind.SEQUENCE:
            return f"sequence<{self.inner[0]}>"
        if self.kind == TypeKind.MAP:
            return f"map<{self.inner[0]}, {self.inner[1]}>"
        return str(self.name)


@dataclass(frozen=True)
class FieldDef(DataClassJsonMixin):
    """Represents a named, typed field of a variant or record."""

    name: str
    type: FfiType
    docstring: str | None = None


@dataclass(frozen=True)
class VariantDef(DataClassJsonMixin):
    """Represents a single enum variant.

    A variant without fields is a unit case.
    """

    name: str
    fields: list[FieldDef] = field(default_factory=list)
    docstring: str | None = None

    @property
    def has_fields(self) -> bool:
        return len(self.fields) > 0


@dataclass(frozen=True)
class EnumDef(DataClassJsonMixin):
    """Represents a sum type definition.

    Variant order is significant: it determines the wire tags.
    """

    name: str
    variants: list[VariantDef]
    docstring: str | None = None

    @property
    def is_flat(self) -> bool:
        """True when no variant carries fields."""
        return not any(v.has_fields for v in self.variants)


@dataclass(frozen=True)
class RecordDef(DataClassJsonMixin):
    """Represents a record (product type) definition."""

    name: str
    fields: list[FieldDef]
    docstring: str | None = None


@dataclass(frozen=True)
class ObjectDef(DataClassJsonMixin):
    """Represents a foreign object, passed across the boundary by handle."""

    name: str
    docstring: str | None = None


@dataclass(frozen=True)
class Interface(DataClassJsonMixin):
    """Represents a complete interface definition."""

    namespace: str | None = None
    enums: list[EnumDef] = field(default_factory=list)
    records: list[RecordDef] = field(default_factory=list)
    objects: list[ObjectDef] = field(default_factory=list)
    docstring: str | None = None

    def find_enum(self, name: str) -> EnumDef | None:
        return next((e for e in self.enums if e.name == name), None)

    def find_record(self, name: str) -> RecordDef | None:
        return next((r for r in self.records if r.name == name), None)

    def find_object(self, name: str) -> ObjectDef | None:
        return next((o for o in self.objects if o.name == name), None)

    def declaration_names(self) -> list[str]:
        """Names of every declaration, in enum, record, object order."""
        return (
            [e.name for e in self.enums]
            + [r.name for r in self.records]
            + [o.name for o in self.objects]
        )


PRIMITIVE_TYPES = frozenset(
    [
        "bool",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "float32",
        "float64",
        "bytes",
        "string",
    ]
)


def primitive_types() -> list[str]:
    """Return a list of primitive type names."""
    return list(PRIMITIVE_TYPES)


def is_primitive(t: FfiType) -> bool:
    """Check if a type is a primitive type."""
    return t.kind == TypeKind.PRIMITIVE
