"""Resolution of Protobuf field types to generated type names and tags."""

from __future__ import annotations

from google.protobuf import descriptor_pb2

from prostgen.codegen_support import bytes_type_rust_type
from prostgen.config import BytesType, Config
from prostgen.extern_paths import ExternPaths
from prostgen.ident import to_snake, to_upper_camel

__all__ = ["TypeResolver"]

_F = descriptor_pb2.FieldDescriptorProto

_SCALAR_TYPES = {
    _F.TYPE_FLOAT: "f32",
    _F.TYPE_DOUBLE: "f64",
    _F.TYPE_UINT32: "u32",
    _F.TYPE_FIXED32: "u32",
    _F.TYPE_UINT64: "u64",
    _F.TYPE_FIXED64: "u64",
    _F.TYPE_INT32: "i32",
    _F.TYPE_SFIXED32: "i32",
    _F.TYPE_SINT32: "i32",
    _F.TYPE_ENUM: "i32",
    _F.TYPE_INT64: "i64",
    _F.TYPE_SFIXED64: "i64",
    _F.TYPE_SINT64: "i64",
    _F.TYPE_BOOL: "bool",
}

_TYPE_TAGS = {
    _F.TYPE_FLOAT: "float",
    _F.TYPE_DOUBLE: "double",
    _F.TYPE_INT32: "int32",
    _F.TYPE_INT64: "int64",
    _F.TYPE_UINT32: "uint32",
    _F.TYPE_UINT64: "uint64",
    _F.TYPE_SINT32: "sint32",
    _F.TYPE_SINT64: "sint64",
    _F.TYPE_FIXED32: "fixed32",
    _F.TYPE_FIXED64: "fixed64",
    _F.TYPE_SFIXED32: "sfixed32",
    _F.TYPE_SFIXED64: "sfixed64",
    _F.TYPE_BOOL: "bool",
    _F.TYPE_STRING: "string",
    _F.TYPE_BYTES: "bytes",
    _F.TYPE_GROUP: "group",
    _F.TYPE_MESSAGE: "message",
}


def _quoted(s: str) -> str:
    escaped = s.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class TypeResolver:
    """Maps Protobuf types to generated names relative to the current package."""

    def __init__(self, config: Config, extern_paths: ExternPaths, package: str) -> None:
        self.config = config
        self.extern_paths = extern_paths
        self.package = package

    @property
    def _prost_path(self) -> str:
        return self.config.prost_crate_path or "::prost"

    def resolve_ident(self, pb_ident: str) -> str:
        """Return the path of a fully qualified Protobuf type as seen from the package."""
        if not pb_ident.startswith("."):
            raise ValueError(f"identifier is not fully qualified: {pb_ident!r}")

        external = self.extern_paths.resolve_ident(pb_ident)
        if external is not None:
            return external

        local_path = self.package.split(".")
        if local_path and local_path[0] == "":
            local_path = local_path[1:]

        ident_path = pb_ident[1:].split(".")
        ident_type = ident_path.pop()

        common = 0
        for local, ident in zip(local_path, ident_path):
            if local != ident:
                break
            common += 1

        parts = ["super"] * (len(local_path) - common)
        parts.extend(to_snake(segment) for segment in ident_path[common:])
        parts.append(to_upper_camel(ident_type))
        return "::".join(parts)

    def resolve_type(self, field: descriptor_pb2.FieldDescriptorProto, fq_message_name: str) -> str:
        """Return the generated type of a field's values."""
        field_type = field.type
        scalar = _SCALAR_TYPES.get(field_type)
        if scalar is not None:
            return scalar
        if field_type == _F.TYPE_STRING:
            return f"{self._prost_path}::alloc::string::String"
        if field_type == _F.TYPE_BYTES:
            bytes_type = self.config.bytes_types.get_first_field(fq_message_name, field.name)
            return bytes_type_rust_type(bytes_type or BytesType.VEC)
        if field_type in (_F.TYPE_GROUP, _F.TYPE_MESSAGE):
            return self.resolve_ident(field.type_name)
        raise ValueError(f"unknown field type: {field_type}")

    def field_type_tag(self, field: descriptor_pb2.FieldDescriptorProto) -> str:
        """Return the field annotation tag for a field's type."""
        if field.type == _F.TYPE_ENUM:
            return f"enumeration={_quoted(self.resolve_ident(field.type_name))}"
        try:
            return _TYPE_TAGS[field.type]
        except KeyError:
            raise ValueError(f"unknown field type: {field.type}") from None

    def map_value_type_tag(self, field: descriptor_pb2.FieldDescriptorProto) -> str:
        """Return the annotation tag for the value of a map field."""
        if field.type == _F.TYPE_ENUM:
            return f"enumeration({self.resolve_ident(field.type_name)})"
        return self.field_type_tag(field)