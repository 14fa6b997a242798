import pytest
from google.protobuf import descriptor_pb2

from prostgen.enum_gen import (
    EnumVariantMapping,
    build_enum_value_mappings,
    render_enum_impl,
)


def _values(*pairs):
    return [
        descriptor_pb2.EnumValueDescriptorProto(name=name, number=number)
        for name, number in pairs
    ]


SERVING_STATUS_IMPL = """impl ServingStatus {
    /// String value of the enum field names used in the ProtoBuf definition.
    ///
    /// The values are not transformed in any way and thus are considered stable
    /// (if the ProtoBuf definition does not change) and safe for programmatic use.
    pub fn as_str_name(&self) -> &'static str {
        match self {
            ServingStatus::Unknown => "UNKNOWN",
            ServingStatus::Serving => "SERVING",
            ServingStatus::NotServing => "NOT_SERVING",
        }
    }
    /// Creates an enum from field names used in the ProtoBuf definition.
    pub fn from_str_name(value: &str) -> ::core::option::Option<Self> {
        match value {
            "UNKNOWN" => Some(Self::Unknown),
            "SERVING" => Some(Self::Serving),
            "NOT_SERVING" => Some(Self::NotServing),
            _ => None,
        }
    }
}
"""


def _serving_status():
    return build_enum_value_mappings(
        "ServingStatus",
        True,
        _values(("UNKNOWN", 0), ("SERVING", 1), ("NOT_SERVING", 2)),
    )


def test_serving_status_mappings():
    mappings = _serving_status()
    assert [m.generated_variant_name for m in mappings] == [
        "Unknown",
        "Serving",
        "NotServing",
    ]
    assert [m.proto_name for m in mappings] == ["UNKNOWN", "SERVING", "NOT_SERVING"]
    assert [m.proto_number for m in mappings] == [0, 1, 2]
    assert [m.path_idx for m in mappings] == [0, 1, 2]


def test_render_matches_expected_fixture():
    assert render_enum_impl("ServingStatus", _serving_status(), 0) == SERVING_STATUS_IMPL


def test_render_indents_every_line_by_depth():
    flat = render_enum_impl("ServingStatus", _serving_status(), 0)
    nested = render_enum_impl("ServingStatus", _serving_status(), 2)
    assert nested.splitlines() == ["        " + line for line in flat.splitlines()]


def test_prefix_is_stripped():
    mappings = build_enum_value_mappings(
        "Color", True, _values(("COLOR_RED", 0), ("COLOR_GREEN", 1))
    )
    assert [m.generated_variant_name for m in mappings] == ["Red", "Green"]


def test_prefix_is_retained_when_disabled():
    mappings = build_enum_value_mappings("Color", False, _values(("COLOR_RED", 0)))
    assert mappings == [EnumVariantMapping(0, "COLOR_RED", 0, "ColorRed")]


def test_aliases_are_skipped_but_indices_kept():
    mappings = build_enum_value_mappings(
        "Status", True, _values(("STARTED", 1), ("RUNNING", 1), ("DONE", 2))
    )
    assert [m.proto_name for m in mappings] == ["STARTED", "DONE"]
    assert [m.path_idx for m in mappings] == [0, 2]


def test_overlapping_variant_names_raise():
    with pytest.raises(ValueError, match="Generated enum variant names overlap"):
        build_enum_value_mappings("Foo", True, _values(("FOO_BAR", 0), ("BAR", 1)))


def test_empty_enum_renders_only_fallback_arm():
    rendered = render_enum_impl("Empty", [], 0)
    assert "_ => None," in rendered
    assert "=> Some(" not in rendered
    assert rendered.startswith("impl Empty {\n")
    assert rendered.endswith("}\n")