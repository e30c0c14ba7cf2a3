"""Interface definition parser using Lark."""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, TypeVar

from lark import Lark
from lark.visitors import Transformer

from .types import (
    PRIMITIVE_TYPES,
    EnumDef,
    FfiType,
    FieldDef,
    Interface,
    ObjectDef,
    RecordDef,
    TypeKind,
    VariantDef,
)
from .validation import ValidationError, validate

logger = logging.getLogger(__name__)

_g_parser: Lark | None = None

__all__ = ["ValidationError", "load_interface", "parse", "resolve_types"]


@dataclass
class _Doc:
    value: str


@dataclass
class _Name:
    value: str


@dataclass
class _Namespace:
    value: str
    docstring: str | None


@dataclass
class _Fields:
    fields: list[FieldDef]


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    # Return _Fields objects as-is
    if isinstance(filtered[0], _Fields):
        return filtered[0]

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


TMany = TypeVar("TMany")


def _find_many(args: list[Any], class_type: type[TMany]) -> list[TMany]:
    return _filter(args, class_type)


def _docstring(args: list[Any]) -> str | None:
    lines = [doc.value for doc in _find_many(args, _Doc)]
    if not lines:
        return None
    return "\n".join(lines)


class TreeTransformer(Transformer):
    """Transform parse tree into interface types."""

    def doc(self, args: list[Any]) -> _Doc:
        text = str(args[0])[3:]
        return _Doc(value=text[1:] if text.startswith(" ") else text)

    def name(self, args: list[Any]) -> _Name:
        return _Name(value=str(args[0]))

    def namespace(self, args: list[Any]) -> _Namespace:
        return _Namespace(value=_find_one(args, _Name), docstring=_docstring(args))

    def named(self, args: list[Any]) -> FfiType:
        return FfiType.named(str(args[0]))

    def optional(self, args: list[Any]) -> FfiType:
        return FfiType.optional(args[0])

    def sequence(self, args: list[Any]) -> FfiType:
        return FfiType.sequence(args[0])

    def map(self, args: list[Any]) -> FfiType:
        return FfiType.map(args[0], args[1])

    def field(self, args: list[Any]) -> FieldDef:
        return FieldDef(
            name=_find_one(args, _Name),
            type=_find_one(args, FfiType),
            docstring=_docstring(args),
        )

    def variant_fields(self, args: list[Any]) -> _Fields:
        return _Fields(fields=_find_many(args, FieldDef))

    def variant(self, args: list[Any]) -> VariantDef:
        fields = _find_one(args, _Fields)
        return VariantDef(
            name=_find_one(args, _Name),
            fields=fields.fields if fields else [],
            docstring=_docstring(args),
        )

    def enum(self, args: list[Any]) -> EnumDef:
        return EnumDef(
            name=_find_one(args, _Name),
            variants=_find_many(args, VariantDef),
            docstring=_docstring(args),
        )

    def record(self, args: list[Any]) -> RecordDef:
        return RecordDef(
            name=_find_one(args, _Name),
            fields=_find_many(args, FieldDef),
            docstring=_docstring(args),
        )

    def object(self, args: list[Any]) -> ObjectDef:
        return ObjectDef(name=_find_one(args, _Name), docstring=_docstring(args))


def _resolve_type(t: FfiType, kinds: dict[str, TypeKind]) -> FfiType:
    if t.inner:
        return replace(t, inner=[_resolve_type(inner, kinds) for inner in t.inner])
    if t.kind != TypeKind.UNRESOLVED:
        return t
    if t.name in PRIMITIVE_TYPES:
        return FfiType.primitive(t.name)
    if t.name in kinds:
        return FfiType.named(t.name, kinds[t.name])
    # Left unresolved; validation reports it
    return t


def _resolve_fields(fields: list[FieldDef], kinds: dict[str, TypeKind]) -> list[FieldDef]:
    return [replace(f, type=_resolve_type(f.type, kinds)) for f in fields]


def resolve_types(interface: Interface) -> Interface:
    """Replace named type references with their declared kinds."""
    kinds: dict[str, TypeKind] = {}
    kinds.update({o.name: TypeKind.OBJECT for o in interface.objects})
    kinds.update({r.name: TypeKind.RECORD for r in interface.records})
    kinds.update({e.name: TypeKind.ENUM for e in interface.enums})

    enums = [
        replace(
            enum,
            variants=[
                replace(v, fields=_resolve_fields(v.fields, kinds)) for v in enum.variants
            ],
        )
        for enum in interface.enums
    ]
    records = [replace(r, fields=_resolve_fields(r.fields, kinds)) for r in interface.records]
    return replace(interface, enums=enums, records=records)


def parse(text: str) -> Interface:
    """Parse an interface definition file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/idl.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar)

    tree = _g_parser.parse(text)
    tree = TreeTransformer().transform(tree)

    items = next(iter(tree.iter_subtrees_topdown())).children

    namespaces = _find_many(items, _Namespace)
    if len(namespaces) > 1:
        raise ValidationError("Only one namespace may be declared")

    interface = Interface(
        namespace=namespaces[0].value if namespaces else None,
        enums=_find_many(items, EnumDef),
        records=_find_many(items, RecordDef),
        objects=_find_many(items, ObjectDef),
        docstring=namespaces[0].docstring if namespaces else None,
    )
    interface = resolve_types(interface)

    validate(interface)
    logger.debug(
        "Parsed interface %s: %d enums, %d records, %d objects",
        interface.namespace,
        len(interface.enums),
        len(interface.records),
        len(interface.objects),
    )

    return interface


def load_interface(path: str | Path) -> Interface:
    """Load an interface from IDL text, or from a JSON-serialized model."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    if path.suffix == ".json":
        interface = resolve_types(Interface.from_json(text))
        validate(interface)
        return interface

    return parse(text)
