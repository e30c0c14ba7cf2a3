"""Tests for object reference detection."""

from ffiwire.generator import parse
from ffiwire.generator.references import (
    ObjectReferenceAnalyzer,
    types_without_object_references,
)
from ffiwire.generator.types import FfiType, TypeKind

IDL = """
object Session

record Point { x: int32, y: int32 }
record Owner { session: Session }
record Link { next: Link?, label: string }
record Left { right: Right? }
record Right { left: Left?, session: Session }

enum Status { Ok Err(code: int32) }
enum Direct { Open(session: Session) Closed }
enum Optional { Maybe(session: Session?) }
enum Listed { Many(sessions: sequence<Session>) }
enum Keyed { Table(entries: map<string, Session>) }
enum ViaRecord { Owned(owner: Owner) }
enum ViaEnum { Wrapped(inner: Direct) }
enum Plain { Located(at: Point, status: Status, links: sequence<Link>) }
"""


def describe_object_reference_analyzer():
    def detects_direct_references(expect):
        analyzer = ObjectReferenceAnalyzer(parse(IDL))
        expect(analyzer.declaration_contains_object_references("Direct")) == True
        expect(analyzer.declaration_contains_object_references("Status")) == False

    def detects_references_inside_composites(expect):
        analyzer = ObjectReferenceAnalyzer(parse(IDL))
        expect(analyzer.declaration_contains_object_references("Optional")) == True
        expect(analyzer.declaration_contains_object_references("Listed")) == True
        expect(analyzer.declaration_contains_object_references("Keyed")) == True

    def detects_transitive_references(expect):
        analyzer = ObjectReferenceAnalyzer(parse(IDL))
        expect(analyzer.declaration_contains_object_references("ViaRecord")) == True
        expect(analyzer.declaration_contains_object_references("ViaEnum")) == True

    def handles_cycles(expect):
        analyzer = ObjectReferenceAnalyzer(parse(IDL))
        expect(analyzer.declaration_contains_object_references("Link")) == False
        expect(analyzer.declaration_contains_object_references("Left")) == True
        expect(analyzer.declaration_contains_object_references("Right")) == True

    def checks_field_types(expect):
        analyzer = ObjectReferenceAnalyzer(parse(IDL))
        session = FfiType.named("Session", TypeKind.OBJECT)
        expect(analyzer.contains_object_references(FfiType.primitive("string"))) == False
        expect(analyzer.contains_object_references(FfiType.optional(session))) == True
        point = FfiType.named("Point", TypeKind.RECORD)
        expect(analyzer.contains_object_references(point)) == False

    def treats_unknown_declarations_as_opaque(expect):
        analyzer = ObjectReferenceAnalyzer(parse(IDL))
        expect(analyzer.declaration_contains_object_references("Missing")) == True

    def gives_consistent_answers(expect):
        analyzer = ObjectReferenceAnalyzer(parse(IDL))
        first = analyzer.supports_equality("Plain")
        expect(analyzer.supports_equality("Plain")) == first
        expect(first) == True


def describe_types_without_object_references():
    def lists_equatable_declarations(expect):
        names = types_without_object_references(parse(IDL))
        expect(names) == {"Point", "Link", "Status", "Plain"}
