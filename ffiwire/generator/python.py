"""Python code generator for ffiwire interfaces."""

import keyword
import logging
from importlib import resources

from jinja2 import Environment, PackageLoader

from .layout import enum_layout
from .references import ObjectReferenceAnalyzer
from .sizes import SizeCalculator
from .types import EnumDef, FfiType, FieldDef, Interface, TypeKind, VariantDef
from .util import docstring_lines, to_snake_case
from .validation import ValidationError, check_target_names

logger = logging.getLogger(__name__)

RUNTIME_FILES = [
    "__init__.py",
    "buffer.py",
    "serialization.py",
]

env = Environment(
    loader=PackageLoader("ffiwire.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

# Map ffiwire types to Python type annotations
PRIMITIVE_TYPE_MAP = {
    "bool": "bool",
    "int8": "int",
    "int16": "int",
    "int32": "int",
    "int64": "int",
    "uint8": "int",
    "uint16": "int",
    "uint32": "int",
    "uint64": "int",
    "float32": "float",
    "float64": "float",
    "bytes": "bytes",
    "string": "str",
}

# Map ffiwire types to Reader/Writer method suffixes
CODEC_SUFFIXES = {
    "bool": "bool",
    "int8": "i8",
    "int16": "i16",
    "int32": "i32",
    "int64": "i64",
    "uint8": "u8",
    "uint16": "u16",
    "uint32": "u32",
    "uint64": "u64",
    "float32": "f32",
    "float64": "f64",
    "bytes": "bytes",
    "string": "string",
}

USER_KINDS = (TypeKind.RECORD, TypeKind.ENUM, TypeKind.OBJECT)

# Members generated classes inherit from the runtime base classes
RESERVED_MEMBERS = frozenset(
    ["pack", "unpack", "variants", "wire_tag", "_read", "_write", "_variant_types"]
)

# Names bound by the generated module header
MODULE_NAMES = frozenset(
    [
        "ClassVar",
        "FfiEnum",
        "FfiObject",
        "FfiRecord",
        "InvalidEnumTagError",
        "Reader",
        "Writer",
        "dataclass",
        "hash_fields",
        "variant_of",
    ]
)


def py_name(name: str) -> str:
    """Python identifier for a field."""
    ident = to_snake_case(name)
    if keyword.iskeyword(ident) or keyword.issoftkeyword(ident) or ident in RESERVED_MEMBERS:
        return ident + "_"
    return ident


def variant_name(name: str) -> str:
    """Attribute name of a variant on its enum class."""
    if keyword.iskeyword(name) or name in RESERVED_MEMBERS:
        return name + "_"
    return name


def check_identifiers(interface: Interface) -> None:
    """Reject models whose generated Python names would clash."""
    for name in interface.declaration_names():
        if keyword.iskeyword(name) or name in MODULE_NAMES:
            raise ValidationError(f"{name} cannot be used as a Python class name")
    for enum in interface.enums:
        check_target_names(
            enum.name, "variant", [v.name for v in enum.variants], variant_name, "Python"
        )
        for v in enum.variants:
            check_target_names(
                f"{enum.name}.{v.name}", "field", [f.name for f in v.fields], py_name, "Python"
            )
    for record in interface.records:
        check_target_names(
            record.name, "field", [f.name for f in record.fields], py_name, "Python"
        )
    check_target_names(
        "Module",
        "variant",
        [f"{e.name}.{v.name}" for e in interface.enums for v in e.variants],
        lambda name: "_" + name.replace(".", ""),
        "Python",
    )


def needs_hash(fields: list[FieldDef]) -> bool:
    """Whether dataclass hashing would fail on a list or dict field."""
    return any(
        t.kind in (TypeKind.SEQUENCE, TypeKind.MAP) for f in fields for t in f.type.iter_types()
    )


def variant_class_name(enum: EnumDef, variant: VariantDef) -> str:
    """Module-level name of the class implementing a variant."""
    return f"_{enum.name}{variant.name}"


def map_type(t: FfiType) -> str:
    """Map a field type to a Python type annotation."""
    if t.kind == TypeKind.PRIMITIVE:
        return PRIMITIVE_TYPE_MAP[str(t.name)]
    if t.kind == TypeKind.OPTIONAL:
        return f"{map_type(t.inner[0])} | None"
    if t.kind == TypeKind.SEQUENCE:
        return f"list[{map_type(t.inner[0])}]"
    if t.kind == TypeKind.MAP:
        return f"dict[{map_type(t.inner[0])}, {map_type(t.inner[1])}]"
    if t.kind in USER_KINDS:
        return str(t.name)
    raise ValueError(f"Unresolved type: {t}")


def annotation(t: FfiType) -> str:
    """Annotation text for a dataclass field.

    Annotations naming generated classes are quoted, since those classes may
    be defined further down the module.
    """
    text = map_type(t)
    if any(inner.kind in USER_KINDS for inner in t.iter_types()):
        return f'"{text}"'
    return text


def _min_size_arg(items: list[FfiType], sizes: SizeCalculator | None) -> str:
    if sizes is None:
        return ""
    return f", min_size={sum(sizes.calc_type_size(t).min_size for t in items)}"


def read_expr(t: FfiType, buf: str = "buf", sizes: SizeCalculator | None = None) -> str:
    """Expression reading a value of type ``t`` from cursor ``buf``.

    With ``sizes``, collection reads are told the smallest encoding of one
    item so the cursor can reject counts the buffer cannot hold.
    """
    if t.kind == TypeKind.PRIMITIVE:
        return f"{buf}.read_{CODEC_SUFFIXES[str(t.name)]}()"
    if t.kind in USER_KINDS:
        return f"{t.name}._read({buf})"
    if t.kind == TypeKind.OPTIONAL:
        return f"{buf}.read_optional(lambda {buf}: {read_expr(t.inner[0], buf, sizes)})"
    if t.kind == TypeKind.SEQUENCE:
        return (
            f"{buf}.read_sequence(lambda {buf}: {read_expr(t.inner[0], buf, sizes)}"
            f"{_min_size_arg(t.inner, sizes)})"
        )
    if t.kind == TypeKind.MAP:
        return (
            f"{buf}.read_map(lambda {buf}: {read_expr(t.inner[0], buf, sizes)}, "
            f"lambda {buf}: {read_expr(t.inner[1], buf, sizes)}"
            f"{_min_size_arg(t.inner, sizes)})"
        )
    raise ValueError(f"Unresolved type: {t}")


def write_expr(t: FfiType, value: str, buf: str = "buf") -> str:
    """Statement writing ``value`` of type ``t`` to cursor ``buf``."""
    if t.kind == TypeKind.PRIMITIVE:
        return f"{buf}.write_{CODEC_SUFFIXES[str(t.name)]}({value})"
    if t.kind in USER_KINDS:
        return f"{value}._write({buf})"
    if t.kind == TypeKind.OPTIONAL:
        inner = write_expr(t.inner[0], "v", buf)
        return f"{buf}.write_optional({value}, lambda v, {buf}: {inner})"
    if t.kind == TypeKind.SEQUENCE:
        inner = write_expr(t.inner[0], "v", buf)
        return f"{buf}.write_sequence({value}, lambda v, {buf}: {inner})"
    if t.kind == TypeKind.MAP:
        key = write_expr(t.inner[0], "k", buf)
        val = write_expr(t.inner[1], "v", buf)
        return f"{buf}.write_map({value}, lambda k, {buf}: {key}, lambda v, {buf}: {val})"
    raise ValueError(f"Unresolved type: {t}")


def _write_field(f: FieldDef) -> str:
    return write_expr(f.type, f"self.{py_name(f.name)}")


def _pydoc(text: str | None, indent: int = 4) -> str:
    """Render an indented docstring block without a trailing newline."""
    lines = [line.replace('"""', '\\"\\"\\"') for line in docstring_lines(text)]
    if not lines:
        return ""
    pad = " " * indent
    if len(lines) == 1:
        return f'{pad}"""{lines[0]}"""'
    body = "\n".join(f"{pad}{line}" if line else "" for line in lines[1:])
    return f'{pad}"""{lines[0]}\n{body}\n{pad}"""'


def render(interface: Interface, runtime_import: str = "ffiwire_runtime") -> str:
    """Render an interface definition to Python source code."""
    check_identifiers(interface)
    analyzer = ObjectReferenceAnalyzer(interface)
    sizes = SizeCalculator(interface)
    layouts = {enum.name: enum_layout(enum) for enum in interface.enums}

    for enum in interface.enums:
        logger.debug(
            "Rendering enum %s: %d variants, equality=%s",
            enum.name,
            len(enum.variants),
            analyzer.supports_equality(enum.name),
        )

    return template.render(
        interface=interface,
        layouts=layouts,
        supports_equality=analyzer.supports_equality,
        annotation=annotation,
        needs_hash=needs_hash,
        py_name=py_name,
        variant_name=variant_name,
        variant_class_name=variant_class_name,
        read_field=lambda f: read_expr(f.type, sizes=sizes),
        write_field=_write_field,
        pydoc=_pydoc,
        runtime_import=runtime_import,
    )


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("ffiwire.proto").joinpath(filename).read_text()
        result[filename] = content
    return result
