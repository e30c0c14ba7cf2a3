"""Base classes for generated ffiwire types."""

from collections.abc import Callable
from dataclasses import fields
from typing import Any, ClassVar, Self, TypeVar

from .buffer import Reader, SerializationError, Writer

TVariant = TypeVar("TVariant", bound=type)


class InvalidEnumTagError(SerializationError):
    """Raised when a decoded discriminant matches no variant."""

    def __init__(self, enum_name: str, tag: int) -> None:
        super().__init__(f"Invalid discriminant {tag} for enum {enum_name}")
        self.enum_name = enum_name
        self.tag = tag


class _Lowered:
    """Shared pack/unpack plumbing. Generated code implements _read/_write."""

    def pack(self) -> bytes:
        """Pack this value to bytes."""
        buf = Writer()
        self._write(buf)
        return buf.getvalue()

    @classmethod
    def unpack(cls, data: bytes | memoryview, offset: int = 0) -> tuple[Self, int]:
        """Unpack a value from bytes.

        Args:
            data: The bytes to unpack from.
            offset: Starting offset in data.

        Returns:
            Tuple of (instance, bytes_consumed).
        """
        buf = Reader(data, offset)
        value = cls._read(buf)
        return value, buf.offset - offset

    @classmethod
    def _read(cls, buf: Reader) -> Self:
        raise NotImplementedError("_read() must be implemented by generated code")

    def _write(self, buf: Writer) -> None:
        raise NotImplementedError("_write() must be implemented by generated code")


class FfiRecord(_Lowered):
    """Base class for generated record types.

    Example:
        @dataclass(frozen=True)
        class Point(FfiRecord):
            x: float
            y: float
    """


class FfiEnum(_Lowered):
    """Base class for generated sum types.

    The generated class is abstract; values are instances of its variants,
    which are frozen dataclasses attached with ``variant_of``.

    Example:
        class Status(FfiEnum):
            ...

        @variant_of(Status, "Ok")
        @dataclass(frozen=True)
        class _StatusOk(Status):
            wire_tag: ClassVar[int] = 1
    """

    wire_tag: ClassVar[int]
    _variant_types: ClassVar[dict[str, type]]

    def __new__(cls, *args: Any, **kwargs: Any) -> Self:
        if not hasattr(cls, "wire_tag"):
            raise TypeError(f"{cls.__qualname__} is a sum type; construct one of its variants")
        return super().__new__(cls)

    @classmethod
    def variants(cls) -> tuple[type, ...]:
        """Variant classes in declaration order."""
        return tuple(cls.__dict__.get("_variant_types", {}).values())


def variant_of(enum: type[FfiEnum], name: str) -> Callable[[TVariant], TVariant]:
    """Attach a variant class to its enum as ``enum.<name>``."""

    def wrap(cls: TVariant) -> TVariant:
        cls.__name__ = name
        cls.__qualname__ = f"{enum.__qualname__}.{name}"

        registry = enum.__dict__.get("_variant_types")
        if registry is None:
            registry = {}
            enum._variant_types = registry
        registry[name] = cls

        setattr(enum, name, cls)
        return cls

    return wrap


class FfiObject(_Lowered):
    """Base class for foreign objects, passed across the boundary by handle.

    Objects compare by identity: a handle says nothing about the value
    behind it.
    """

    def __init__(self, handle: int) -> None:
        self._handle = handle

    @property
    def handle(self) -> int:
        return self._handle

    @classmethod
    def _read(cls, buf: Reader) -> Self:
        return cls(buf.read_handle())

    def _write(self, buf: Writer) -> None:
        buf.write_handle(self._handle)

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}(handle=0x{self._handle:x})"


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, dict):
        return frozenset((_freeze(k), _freeze(v)) for k, v in value.items())
    return value


def hash_fields(value: Any) -> int:
    """Hash a frozen dataclass whose fields may hold lists or dicts.

    Collections are hashed by content, matching the generated ``__eq__``.
    """
    return hash((type(value), *(_freeze(getattr(value, f.name)) for f in fields(value))))
