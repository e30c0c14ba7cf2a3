"""Detection of foreign object references in interface types.

Object handles have no stable value identity, so any type that can hold one,
directly or through its fields, does not get generated equality or hashing.
"""

from .types import FfiType, FieldDef, Interface, TypeKind


class ObjectReferenceAnalyzer:
    """Answer "does this type contain an object reference?" for one interface.

    Results for records and enums are memoized by name, so repeated queries
    from different emitters cost a dictionary lookup.
    """

    def __init__(self, interface: Interface):
        self.interface = interface
        self._enums = {e.name: e for e in interface.enums}
        self._records = {r.name: r for r in interface.records}
        self._cache: dict[str, bool] = {}

    def contains_object_references(self, t: FfiType) -> bool:
        """Check if a type transitively references a foreign object."""
        return self._walk_type(t, set())

    def declaration_contains_object_references(self, name: str) -> bool:
        """Check if the record or enum called ``name`` references an object."""
        if name not in self._cache:
            self._cache[name] = self._walk_declaration(name, set())
        return self._cache[name]

    def supports_equality(self, name: str) -> bool:
        """True when equality and hashing can be generated for ``name``."""
        return not self.declaration_contains_object_references(name)

    def _fields(self, name: str) -> list[FieldDef] | None:
        if name in self._enums:
            return [f for v in self._enums[name].variants for f in v.fields]
        if name in self._records:
            return self._records[name].fields
        return None

    def _walk_declaration(self, name: str, seen: set[str]) -> bool:
        if name in self._cache:
            return self._cache[name]
        if name in seen:
            return False
        seen.add(name)

        fields = self._fields(name)
        if fields is None:
            # Unknown declarations are treated as opaque
            return True
        return any(self._walk_type(f.type, seen) for f in fields)

    def _walk_type(self, t: FfiType, seen: set[str]) -> bool:
        if t.kind == TypeKind.OBJECT:
            return True
        if t.kind in (TypeKind.RECORD, TypeKind.ENUM):
            return self._walk_declaration(str(t.name), seen)
        return any(self._walk_type(inner, seen) for inner in t.inner)


def types_without_object_references(interface: Interface) -> set[str]:
    """Compute the set of record and enum names that hold no object references."""
    analyzer = ObjectReferenceAnalyzer(interface)
    names = [e.name for e in interface.enums] + [r.name for r in interface.records]
    return {name for name in names if analyzer.supports_equality(name)}
