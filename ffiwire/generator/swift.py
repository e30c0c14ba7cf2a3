"""Swift code generator for ffiwire interfaces.

The generated file relies on the usual Swift FFI support code for the
primitive converters (``FfiConverterInt32`` and friends), ``readInt``/
``writeInt`` and ``UniffiInternalError``.
"""

import logging

from jinja2 import Environment, PackageLoader

from .layout import enum_layout
from .references import ObjectReferenceAnalyzer
from .types import FfiType, FieldDef, Interface, TypeKind
from .util import docstring_lines, to_camel_case
from .validation import check_target_names

logger = logging.getLogger(__name__)

env = Environment(
    loader=PackageLoader("ffiwire.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("swift.swift.j2")

PRIMITIVE_TYPE_MAP = {
    "bool": "Bool",
    "int8": "Int8",
    "int16": "Int16",
    "int32": "Int32",
    "int64": "Int64",
    "uint8": "UInt8",
    "uint16": "UInt16",
    "uint32": "UInt32",
    "uint64": "UInt64",
    "float32": "Float",
    "float64": "Double",
    "bytes": "Data",
    "string": "String",
}

SWIFT_KEYWORDS = frozenset(
    [
        "as",
        "case",
        "class",
        "default",
        "defer",
        "do",
        "else",
        "enum",
        "extension",
        "for",
        "func",
        "if",
        "import",
        "in",
        "init",
        "internal",
        "is",
        "let",
        "nil",
        "operator",
        "private",
        "protocol",
        "public",
        "repeat",
        "return",
        "self",
        "static",
        "struct",
        "switch",
        "throw",
        "true",
        "false",
        "try",
        "var",
        "where",
        "while",
    ]
)


def type_name(name: str) -> str:
    return to_camel_case(name, upper=True)


def var_name(name: str) -> str:
    ident = to_camel_case(name)
    if ident in SWIFT_KEYWORDS:
        return f"`{ident}`"
    return ident


def enum_variant_name(name: str) -> str:
    return var_name(name)


def check_identifiers(interface: Interface) -> None:
    """Reject models whose names collide once converted to Swift casing."""
    check_target_names(
        "Interface", "declaration", interface.declaration_names(), type_name, "Swift"
    )
    for enum in interface.enums:
        check_target_names(
            enum.name, "variant", [v.name for v in enum.variants], enum_variant_name, "Swift"
        )
        for v in enum.variants:
            check_target_names(
                f"{enum.name}.{v.name}", "field", [f.name for f in v.fields], var_name, "Swift"
            )
    for record in interface.records:
        check_target_names(
            record.name, "field", [f.name for f in record.fields], var_name, "Swift"
        )


def map_type(t: FfiType) -> str:
    """Map a field type to a Swift type."""
    if t.kind == TypeKind.PRIMITIVE:
        return PRIMITIVE_TYPE_MAP[str(t.name)]
    if t.kind == TypeKind.OPTIONAL:
        return f"{map_type(t.inner[0])}?"
    if t.kind == TypeKind.SEQUENCE:
        return f"[{map_type(t.inner[0])}]"
    if t.kind == TypeKind.MAP:
        return f"[{map_type(t.inner[0])}: {map_type(t.inner[1])}]"
    if t.kind in (TypeKind.RECORD, TypeKind.ENUM, TypeKind.OBJECT):
        return type_name(str(t.name))
    raise ValueError(f"Unresolved type: {t}")


def _canonical_name(t: FfiType) -> str:
    if t.kind == TypeKind.PRIMITIVE:
        return PRIMITIVE_TYPE_MAP[str(t.name)]
    if t.kind == TypeKind.OPTIONAL:
        return f"Option{_canonical_name(t.inner[0])}"
    if t.kind == TypeKind.SEQUENCE:
        return f"Sequence{_canonical_name(t.inner[0])}"
    if t.kind == TypeKind.MAP:
        return f"Dictionary{_canonical_name(t.inner[0])}{_canonical_name(t.inner[1])}"
    return f"Type{type_name(str(t.name))}"


def ffi_converter_name(t: FfiType) -> str:
    """Name of the converter that reads and writes ``t``."""
    return f"FfiConverter{_canonical_name(t)}"


def read_expr(t: FfiType, buf: str = "buf") -> str:
    return f"try {ffi_converter_name(t)}.read(from: &{buf})"


def write_expr(t: FfiType, value: str, buf: str = "buf") -> str:
    return f"{ffi_converter_name(t)}.write({value}, into: &{buf})"


def _field_list_decl(fields: list[FieldDef]) -> str:
    return ", ".join(f"{var_name(f.name)}: {map_type(f.type)}" for f in fields)


def _swiftdoc(text: str | None, indent: int = 0) -> str:
    pad = " " * indent
    return "\n".join(f"{pad}/// {line}".rstrip() for line in docstring_lines(text))


def render(interface: Interface, module_name: str | None = None) -> str:
    """Render an interface definition to Swift source code.

    Args:
        interface: The validated interface definition.
        module_name: Name of the module holding the C FFI declarations.
            When given, the output imports `<module_name>FFI` if available.
    """
    check_identifiers(interface)
    analyzer = ObjectReferenceAnalyzer(interface)
    layouts = {enum.name: enum_layout(enum) for enum in interface.enums}
    logger.debug("Rendering %d enums for Swift", len(layouts))

    return template.render(
        interface=interface,
        module_name=module_name,
        layouts=layouts,
        supports_equality=analyzer.supports_equality,
        type_name=type_name,
        var_name=var_name,
        enum_variant_name=enum_variant_name,
        map_type=map_type,
        ffi_converter_name=ffi_converter_name,
        read_field=lambda f: read_expr(f.type),
        write_field=lambda f: write_expr(f.type, var_name(f.name)),
        write_member=lambda f: write_expr(f.type, f"value.{var_name(f.name)}"),
        field_list_decl=_field_list_decl,
        binding_list=lambda fields: ", ".join(var_name(f.name) for f in fields),
        swiftdoc=_swiftdoc,
    )
