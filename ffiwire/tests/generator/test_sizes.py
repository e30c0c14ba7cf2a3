"""Tests for size calculation."""

from ffiwire.generator import parse
from ffiwire.generator.sizes import SizeKind, calculate_sizes


def describe_enum_sizes():
    def sizes_unit_variants_as_tag_only(expect):
        info = calculate_sizes(parse("enum Direction { Up Down }"))

        expect(info.enums["Direction"].size.min_size) == 4
        expect(info.enums["Direction"].size.max_size) == 4
        expect(info.enums["Direction"].size.kind) == SizeKind.FIXED

    def sizes_each_variant(expect):
        info = calculate_sizes(parse("enum Status { Ok Err(code: int32) }"))
        status = info.enums["Status"]

        expect([(v.name, v.tag) for v in status.variants]) == [("Ok", 1), ("Err", 2)]
        expect(status.variants[0].size.max_size) == 4
        expect(status.variants[1].size.max_size) == 8  # tag + int32
        expect(status.size.min_size) == 4
        expect(status.size.max_size) == 8
        expect(status.size.kind) == SizeKind.BOUNDED

    def sizes_fixed_when_all_variants_match(expect):
        info = calculate_sizes(parse("enum Value { A(x: int32) B(y: float32) }"))

        expect(info.enums["Value"].size.kind) == SizeKind.FIXED
        expect(info.enums["Value"].size.max_size) == 8

    def marks_variable_length_fields_unbounded(expect):
        info = calculate_sizes(parse("enum Message { Text(body: string) Empty }"))
        message = info.enums["Message"]

        expect(message.variants[0].size.min_size) == 8  # tag + length prefix
        expect(message.variants[0].size.max_size) == None
        expect(message.size.kind) == SizeKind.UNBOUNDED

    def sizes_nested_enums(expect):
        info = calculate_sizes(
            parse(
                """
                enum Status { Ok Err(code: int32) }
                enum Event { Done(status: Status) }
            """
            )
        )
        expect(info.enums["Event"].size.min_size) == 8
        expect(info.enums["Event"].size.max_size) == 12


def describe_field_sizes():
    def sizes_optionals_as_flag_plus_value(expect):
        info = calculate_sizes(parse("record Maybe { value: int32? }"))

        expect(info.records["Maybe"].size.min_size) == 1
        expect(info.records["Maybe"].size.max_size) == 5
        expect(info.records["Maybe"].size.kind) == SizeKind.BOUNDED

    def sizes_objects_as_handles(expect):
        info = calculate_sizes(parse("object Session\nenum Handle { Open(session: Session) }"))

        expect(info.enums["Handle"].size.max_size) == 12

    def sizes_records(expect):
        info = calculate_sizes(
            parse(
                """
                record Point { x: float64, y: float64 }
                record Empty {}
            """
            )
        )
        expect(info.records["Point"].size.max_size) == 16
        expect(info.records["Point"].size.kind) == SizeKind.FIXED
        expect(info.records["Empty"].size.max_size) == 0

    def sizes_collections_as_unbounded(expect):
        info = calculate_sizes(
            parse("record Bag { items: sequence<int8>, index: map<string, int32> }")
        )

        expect(info.records["Bag"].size.min_size) == 8
        expect(info.records["Bag"].size.max_size) == None

    def handles_self_referencing_records(expect):
        info = calculate_sizes(parse("record Link { value: int32, next: Link? }"))

        expect(info.records["Link"].size.min_size) == 5
        expect(info.records["Link"].size.kind) == SizeKind.UNBOUNDED
