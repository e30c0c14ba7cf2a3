"""Encoded size calculation for interface types."""

from dataclasses import dataclass
from enum import StrEnum, auto

from .layout import TAG_SIZE, enum_layout
from .types import EnumDef, FfiType, FieldDef, Interface, RecordDef, TypeKind

# Primitive type sizes in bytes
PRIMITIVE_SIZES: dict[str, int] = {
    "bool": 1,
    "int8": 1,
    "uint8": 1,
    "int16": 2,
    "uint16": 2,
    "int32": 4,
    "uint32": 4,
    "int64": 8,
    "uint64": 8,
    "float32": 4,
    "float64": 8,
}

LENGTH_PREFIX_SIZE = 4
OPTIONAL_FLAG_SIZE = 1
HANDLE_SIZE = 8


class SizeKind(StrEnum):
    """Classification of size characteristics."""

    FIXED = auto()  # Min == Max, no variable components
    BOUNDED = auto()  # Variable but has calculable max (e.g., optional int32)
    UNBOUNDED = auto()  # Contains a string, bytes, sequence or map


@dataclass(frozen=True)
class SizeInfo:
    """Size information for a type, variant or declaration."""

    min_size: int
    max_size: int | None  # None means unbounded
    kind: SizeKind

    @property
    def is_fixed(self) -> bool:
        return self.kind == SizeKind.FIXED

    @property
    def is_bounded(self) -> bool:
        return self.kind in (SizeKind.FIXED, SizeKind.BOUNDED)


FIXED_ZERO = SizeInfo(0, 0, SizeKind.FIXED)
UNBOUNDED = SizeInfo(LENGTH_PREFIX_SIZE, None, SizeKind.UNBOUNDED)


def _concat(parts: list[SizeInfo]) -> SizeInfo:
    """Size of parts written one after another."""
    total_min = 0
    total_max: int | None = 0
    kind = SizeKind.FIXED

    for size in parts:
        total_min += size.min_size
        if total_max is not None and size.max_size is not None:
            total_max += size.max_size
        else:
            total_max = None

        if size.kind == SizeKind.UNBOUNDED:
            kind = SizeKind.UNBOUNDED
        elif size.kind == SizeKind.BOUNDED and kind == SizeKind.FIXED:
            kind = SizeKind.BOUNDED

    return SizeInfo(total_min, total_max, kind)


def _choice(options: list[SizeInfo]) -> SizeInfo:
    """Size of exactly one of several alternatives."""
    min_size = min(o.min_size for o in options)
    max_sizes = [o.max_size for o in options]
    if any(m is None for m in max_sizes):
        return SizeInfo(min_size, None, SizeKind.UNBOUNDED)

    max_size = max(m for m in max_sizes if m is not None)
    if min_size == max_size and all(o.is_fixed for o in options):
        return SizeInfo(min_size, max_size, SizeKind.FIXED)
    return SizeInfo(min_size, max_size, SizeKind.BOUNDED)


@dataclass(frozen=True)
class VariantSizeInfo:
    """Encoded size of one variant, discriminant included."""

    name: str
    tag: int
    size: SizeInfo


@dataclass(frozen=True)
class EnumSizeInfo:
    """Complete size information for an enum."""

    name: str
    size: SizeInfo
    variants: list[VariantSizeInfo]


@dataclass(frozen=True)
class RecordSizeInfo:
    """Complete size information for a record."""

    name: str
    size: SizeInfo


@dataclass(frozen=True)
class InterfaceSizeInfo:
    """Size information for an entire interface."""

    enums: dict[str, EnumSizeInfo]
    records: dict[str, RecordSizeInfo]


class SizeCalculator:
    """Calculate encoded sizes for interface types."""

    def __init__(self, interface: Interface):
        self.enums = {e.name: e for e in interface.enums}
        self.records = {r.name: r for r in interface.records}
        self._cache: dict[str, SizeInfo] = {}
        self._in_progress: set[str] = set()

    def calc_type_size(self, t: FfiType) -> SizeInfo:
        """Calculate size for any field type."""
        if t.kind == TypeKind.PRIMITIVE:
            name = str(t.name)
            if name in PRIMITIVE_SIZES:
                size = PRIMITIVE_SIZES[name]
                return SizeInfo(size, size, SizeKind.FIXED)
            # string and bytes: length prefix + payload
            return UNBOUNDED

        if t.kind in (TypeKind.SEQUENCE, TypeKind.MAP):
            return UNBOUNDED

        if t.kind == TypeKind.OPTIONAL:
            flag = SizeInfo(OPTIONAL_FLAG_SIZE, OPTIONAL_FLAG_SIZE, SizeKind.FIXED)
            return _choice([flag, _concat([flag, self.calc_type_size(t.inner[0])])])

        if t.kind == TypeKind.OBJECT:
            return SizeInfo(HANDLE_SIZE, HANDLE_SIZE, SizeKind.FIXED)

        if t.kind == TypeKind.ENUM:
            return self._declaration_size(str(t.name))

        if t.kind == TypeKind.RECORD:
            return self._declaration_size(str(t.name))

        raise ValueError(f"Unknown type: {t}")

    def calc_fields_size(self, fields: list[FieldDef]) -> SizeInfo:
        """Calculate size of fields written in order."""
        return _concat([self.calc_type_size(f.type) for f in fields])

    def _declaration_size(self, name: str) -> SizeInfo:
        if name in self._cache:
            return self._cache[name]
        if name in self._in_progress:
            # Self-reference through an optional or collection
            return SizeInfo(0, None, SizeKind.UNBOUNDED)

        self._in_progress.add(name)
        try:
            if name in self.enums:
                size = self.calc_enum_size(self.enums[name]).size
            else:
                size = self.calc_record_size(self.records[name]).size
        finally:
            self._in_progress.discard(name)

        self._cache[name] = size
        return size

    def calc_enum_size(self, enum: EnumDef) -> EnumSizeInfo:
        """Calculate size of an enum and each of its variants."""
        tag = SizeInfo(TAG_SIZE, TAG_SIZE, SizeKind.FIXED)
        variants = [
            VariantSizeInfo(
                name=layout.name,
                tag=layout.tag,
                size=_concat([tag, self.calc_fields_size(layout.fields)]),
            )
            for layout in enum_layout(enum)
        ]
        return EnumSizeInfo(enum.name, _choice([v.size for v in variants]), variants)

    def calc_record_size(self, record: RecordDef) -> RecordSizeInfo:
        """Calculate size of a record."""
        if not record.fields:
            return RecordSizeInfo(record.name, FIXED_ZERO)
        return RecordSizeInfo(record.name, self.calc_fields_size(record.fields))

    def calc_interface_info(self) -> InterfaceSizeInfo:
        """Calculate complete interface size information."""
        return InterfaceSizeInfo(
            enums={name: self.calc_enum_size(e) for name, e in self.enums.items()},
            records={name: self.calc_record_size(r) for name, r in self.records.items()},
        )


def calculate_sizes(interface: Interface) -> InterfaceSizeInfo:
    """Calculate size information for an interface definition."""
    calc = SizeCalculator(interface)
    return calc.calc_interface_info()
