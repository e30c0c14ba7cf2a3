"""Wire layout of enum variants.

Every emitter takes its discriminants from here, so the declaration, the
encoder and the decoder generated for one enum always agree.
"""

from dataclasses import dataclass

from .types import EnumDef, FieldDef, VariantDef
from .validation import check_enum

TAG_SIZE = 4  # int32 discriminant


def wire_tag(index: int) -> int:
    """Discriminant for the variant at zero-based ``index``."""
    return index + 1


@dataclass(frozen=True)
class VariantLayout:
    """A variant paired with its discriminant."""

    tag: int
    variant: VariantDef

    @property
    def name(self) -> str:
        return self.variant.name

    @property
    def fields(self) -> list[FieldDef]:
        return self.variant.fields

    @property
    def has_fields(self) -> bool:
        return self.variant.has_fields


def enum_layout(enum: EnumDef) -> list[VariantLayout]:
    """Assign discriminants to the variants of ``enum`` in declaration order.

    Raises:
        ValidationError: If the enum has no variants, or duplicate variant
            or field names.
    """
    check_enum(enum)
    return [VariantLayout(wire_tag(i), v) for i, v in enumerate(enum.variants)]


def tag_table(enum: EnumDef) -> dict[str, int]:
    """Map variant name to discriminant."""
    return {layout.name: layout.tag for layout in enum_layout(enum)}
