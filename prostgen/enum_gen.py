"""Enum variant naming and the generated string-name conversion block."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from google.protobuf import descriptor_pb2

from prostgen.codegen_support import strip_enum_prefix
from prostgen.ident import to_upper_camel

__all__ = ["EnumVariantMapping", "build_enum_value_mappings", "render_enum_impl"]

_INDENT = "    "


@dataclass(frozen=True)
class EnumVariantMapping:
    """How one Protobuf enum value maps to a generated variant."""

    path_idx: int
    proto_name: str
    proto_number: int
    generated_variant_name: str


def build_enum_value_mappings(
    generated_enum_name: str,
    do_strip_enum_prefix: bool,
    enum_values: Iterable[descriptor_pb2.EnumValueDescriptorProto],
) -> list[EnumVariantMapping]:
    """Map enum values to variant names, skipping aliases of an earlier number."""
    numbers: set[int] = set()
    generated_names: dict[str, str] = {}
    mappings: list[EnumVariantMapping] = []

    for idx, value in enumerate(enum_values):
        if value.number in numbers:
            continue
        numbers.add(value.number)

        variant_name = to_upper_camel(value.name)
        if do_strip_enum_prefix:
            variant_name = strip_enum_prefix(generated_enum_name, variant_name)

        previous = generated_names.get(variant_name)
        if previous is not None:
            raise ValueError(
                f"Generated enum variant names overlap: `{variant_name}` variant name to be "
                f"used both by `{previous}` and `{value.name}` ProtoBuf enum values"
            )
        generated_names[variant_name] = value.name

        mappings.append(
            EnumVariantMapping(
                path_idx=idx,
                proto_name=value.name,
                proto_number=value.number,
                generated_variant_name=variant_name,
            )
        )
    return mappings


def render_enum_impl(
    enum_name: str, mappings: Sequence[EnumVariantMapping], depth: int
) -> str:
    """Render the impl block converting between variants and Protobuf value names."""

    def line(level: int, text: str) -> str:
        return f"{_INDENT * level}{text}\n"

    inner = depth + 1
    out = [
        line(depth, f"impl {enum_name} {{"),
        line(inner, "/// String value of the enum field names used in the ProtoBuf definition."),
        line(inner, "///"),
        line(
            inner,
            "/// The values are not transformed in any way and thus are considered stable",
        ),
        line(
            inner,
            "/// (if the ProtoBuf definition does not change) and safe for programmatic use.",
        ),
        line(inner, "pub fn as_str_name(&self) -> &'static str {"),
        line(inner + 1, "match self {"),
    ]
    out += [
        line(
            inner + 2,
            f'{enum_name}::{m.generated_variant_name} => "{m.proto_name}",',
        )
        for m in mappings
    ]
    out += [
        line(inner + 1, "}"),
        line(inner, "}"),
        line(inner, "/// Creates an enum from field names used in the ProtoBuf definition."),
        line(inner, "pub fn from_str_name(value: &str) -> ::core::option::Option<Self> {"),
        line(inner + 1, "match value {"),
    ]
    out += [
        line(inner + 2, f'"{m.proto_name}" => Some(Self::{m.generated_variant_name}),')
        for m in mappings
    ]
    out += [
        line(inner + 2, "_ => None,"),
        line(inner + 1, "}"),
        line(inner, "}"),
        line(depth, "}"),
    ]
    return "".join(out)