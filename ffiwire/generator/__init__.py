"""ffiwire binding generator."""

from .layout import VariantLayout as VariantLayout
from .layout import enum_layout as enum_layout
from .parser import *
from .references import ObjectReferenceAnalyzer as ObjectReferenceAnalyzer
from .references import types_without_object_references as types_without_object_references
from .sizes import EnumSizeInfo as EnumSizeInfo
from .sizes import InterfaceSizeInfo as InterfaceSizeInfo
from .sizes import SizeCalculator as SizeCalculator
from .sizes import SizeInfo as SizeInfo
from .sizes import SizeKind as SizeKind
from .sizes import calculate_sizes as calculate_sizes
from .types import *
