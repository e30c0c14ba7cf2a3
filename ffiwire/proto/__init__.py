"""Runtime support for ffiwire generated code."""

from .buffer import BufferUnderflowError, Reader, SerializationError, Writer
from .serialization import (
    FfiEnum,
    FfiObject,
    FfiRecord,
    InvalidEnumTagError,
    hash_fields,
    variant_of,
)

__all__ = [
    "BufferUnderflowError",
    "FfiEnum",
    "FfiObject",
    "FfiRecord",
    "InvalidEnumTagError",
    "Reader",
    "SerializationError",
    "Writer",
    "hash_fields",
    "variant_of",
]
