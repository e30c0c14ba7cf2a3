"""Model invariant checks run before any code is generated."""

from collections import Counter
from collections.abc import Callable, Iterable

from .types import PRIMITIVE_TYPES, EnumDef, FfiType, FieldDef, Interface, TypeKind


class ValidationError(RuntimeError):
    """Raised when interface validation fails."""


def _duplicates(names: Iterable[str]) -> list[str]:
    return [name for name, count in Counter(names).items() if count > 1]


def check_fields(owner: str, fields: list[FieldDef]) -> None:
    """Reject duplicate field names within one variant or record."""
    dupes = _duplicates(f.name for f in fields)
    if dupes:
        raise ValidationError(f"{owner} has duplicate field {dupes[0]}")


def check_enum(enum: EnumDef) -> None:
    """Check the invariants wire tag assignment relies on."""
    if not enum.variants:
        raise ValidationError(f"Enum {enum.name} must declare at least one variant")

    dupes = _duplicates(v.name for v in enum.variants)
    if dupes:
        raise ValidationError(f"Enum {enum.name} has duplicate variant {dupes[0]}")

    for variant in enum.variants:
        check_fields(f"{enum.name}.{variant.name}", variant.fields)


def _check_type(owner: str, t: FfiType, declared: dict[str, TypeKind]) -> None:
    for inner in t.iter_types():
        if inner.kind == TypeKind.UNRESOLVED:
            raise ValidationError(f"{owner} references unknown type {inner.name}")
        if inner.is_named and inner.kind != TypeKind.PRIMITIVE:
            if declared.get(str(inner.name)) != inner.kind:
                raise ValidationError(f"{owner} references unknown type {inner.name}")
        if inner.kind == TypeKind.MAP and inner.inner[0].kind != TypeKind.PRIMITIVE:
            raise ValidationError(f"{owner} uses {inner.inner[0]} as a map key")
        if inner.kind == TypeKind.OPTIONAL and inner.inner[0].kind == TypeKind.OPTIONAL:
            raise ValidationError(f"{owner} uses nested optional {inner}")


def _enum_reaches(
    interface: Interface, t: FfiType, target: str, seen: set[str]
) -> bool:
    """Check if ``target`` enum is reachable from type ``t``."""
    for inner in t.iter_types():
        if inner.kind not in (TypeKind.ENUM, TypeKind.RECORD):
            continue
        name = str(inner.name)
        if inner.kind == TypeKind.ENUM and name == target:
            return True
        if name in seen:
            continue
        seen.add(name)

        fields: list[FieldDef] = []
        enum = interface.find_enum(name)
        if enum is not None:
            fields = [f for v in enum.variants for f in v.fields]
        record = interface.find_record(name)
        if record is not None:
            fields = record.fields

        if any(_enum_reaches(interface, f.type, target, seen) for f in fields):
            return True
    return False


def validate(interface: Interface) -> None:
    """Validate a parsed interface definition."""
    names = interface.declaration_names()

    dupes = _duplicates(names)
    if dupes:
        raise ValidationError(f"{dupes[0]} is declared more than once")

    for name in names:
        if name in PRIMITIVE_TYPES:
            raise ValidationError(f"{name} is a primitive type and cannot be redeclared")

    declared: dict[str, TypeKind] = {}
    declared.update({e.name: TypeKind.ENUM for e in interface.enums})
    declared.update({r.name: TypeKind.RECORD for r in interface.records})
    declared.update({o.name: TypeKind.OBJECT for o in interface.objects})

    for enum in interface.enums:
        check_enum(enum)
        for variant in enum.variants:
            for f in variant.fields:
                _check_type(f"{enum.name}.{variant.name}.{f.name}", f.type, declared)

    for record in interface.records:
        check_fields(record.name, record.fields)
        for f in record.fields:
            _check_type(f"{record.name}.{f.name}", f.type, declared)

    # Indirect enums have no finite encoding
    for enum in interface.enums:
        fields = [f for v in enum.variants for f in v.fields]
        if any(_enum_reaches(interface, f.type, enum.name, set()) for f in fields):
            raise ValidationError(f"Recursive enum {enum.name} is not supported")


def check_target_names(
    owner: str, what: str, names: Iterable[str], rename: Callable[[str], str], target: str
) -> None:
    """Reject names that are distinct in the model but collide once renamed for a target."""
    seen: dict[str, str] = {}
    for name in names:
        ident = rename(name)
        if ident in seen:
            raise ValidationError(
                f"{owner} {what}s {seen[ident]} and {name} both map to {target} name {ident}"
            )
        seen[ident] = name
