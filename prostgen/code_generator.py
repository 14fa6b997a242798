"""Generation of message, enum and oneof definitions from a file descriptor."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from enum import Enum

from google.protobuf import descriptor_pb2

from prostgen.ast import Comments, Method, Service
from prostgen.codegen_support import (
    bytes_type_annotation,
    can_pack,
    escape_bytes_default,
    map_type_annotation,
    map_type_rust_type,
    strip_enum_prefix,
    unescape_c_escape_string,
)
from prostgen.config import BytesType, Config, MapType
from prostgen.enum_gen import build_enum_value_mappings, render_enum_impl
from prostgen.extern_paths import ExternPaths
from prostgen.ident import to_snake, to_upper_camel
from prostgen.message_graph import MessageGraph
from prostgen.resolver import TypeResolver

__all__ = ["CodeGenerator"]

_log = logging.getLogger(__name__)

_F = descriptor_pb2.FieldDescriptorProto
_INDENT = "    "
_ALLOW_EQ = "#[allow(clippy::derive_partial_eq_without_eq)]\n"


class _Syntax(Enum):
    PROTO2 = "proto2"
    PROTO3 = "proto3"


def _any(values: Iterator[object]) -> bool:
    """True if the iterator yields anything, even a None value."""
    return any(True for _ in values)


def _escape_default(s: str) -> str:
    """Escape a string the way a quoted attribute value expects."""
    out: list[str] = []
    for c in s:
        if c == "\t":
            out.append("\\t")
        elif c == "\r":
            out.append("\\r")
        elif c == "\n":
            out.append("\\n")
        elif c in "\\'\"":
            out.append("\\" + c)
        elif " " <= c <= "~":
            out.append(c)
        else:
            out.append(f"\\u{{{ord(c):x}}}")
    return "".join(out)


class CodeGenerator:
    """Generates the code for one file descriptor."""

    def __init__(
        self,
        config: Config,
        message_graph: MessageGraph,
        extern_paths: ExternPaths,
        file: descriptor_pb2.FileDescriptorProto,
    ) -> None:
        self.config = config
        self.message_graph = message_graph
        self.extern_paths = extern_paths
        self.file = file

        if not file.HasField("syntax") or file.syntax == "proto2":
            self.syntax = _Syntax.PROTO2
        elif file.syntax == "proto3":
            self.syntax = _Syntax.PROTO3
        else:
            raise ValueError(f"unknown syntax: {file.syntax}")

        self._locations: dict[tuple[int, ...], descriptor_pb2.SourceCodeInfo.Location] | None
        if file.HasField("source_code_info"):
            kept = [
                loc
                for loc in file.source_code_info.location
                if len(loc.path) > 0 and len(loc.path) % 2 == 0
            ]
            kept.sort(key=lambda loc: list(loc.path))
            self._locations = {}
            for loc in kept:
                self._locations.setdefault(tuple(loc.path), loc)
        else:
            self._locations = None

        self.package = file.package
        self._depth = 0
        self._path: list[int] = []
        self._buf: list[str] = []

    def generate(self) -> str:
        """Return the generated code for the file."""
        self.package = self.file.package
        self._depth = 0
        self._path = []
        self._buf = []
        _log.debug("file: %r, package: %r", self.file.name, self.package)

        self._path.append(4)
        for idx, message in enumerate(self.file.message_type):
            self._path.append(idx)
            self._append_message(message)
            self._path.pop()
        self._path.pop()

        self._path.append(5)
        for idx, enum in enumerate(self.file.enum_type):
            self._path.append(idx)
            self._append_enum(enum)
            self._path.pop()
        self._path.pop()

        generator = self.config.generator
        if generator is not None:
            self._path.append(6)
            for idx, service in enumerate(self.file.service):
                self._path.append(idx)
                self._push_service(service)
                self._path.pop()
            self._buf.append(generator.finalize())
            self._path.pop()

        return "".join(self._buf)

    # Output helpers.

    def _push_indent(self) -> None:
        self._buf.append(_INDENT * self._depth)

    def _write_line(self, text: str) -> None:
        self._buf.append(f"{_INDENT * self._depth}{text}\n")

    @property
    def _prost_path(self) -> str:
        return self.config.prost_crate_path or "::prost"

    @property
    def _resolver(self) -> TypeResolver:
        return TypeResolver(self.config, self.extern_paths, self.package)

    def _fq_name(self, name: str) -> str:
        return f"{'.' if self.package else ''}{self.package}.{name}"

    @staticmethod
    def _check_fq(fq_name: str) -> None:
        if not fq_name.startswith("."):
            raise ValueError(f"name is not fully qualified: {fq_name!r}")

    def _append_attributes(self, attributes: Iterator[str]) -> None:
        for attribute in attributes:
            self._write_line(attribute)

    def _append_type_attributes(self, fq_name: str) -> None:
        self._check_fq(fq_name)
        self._append_attributes(self.config.type_attributes.get(fq_name))

    def _append_message_attributes(self, fq_name: str) -> None:
        self._check_fq(fq_name)
        self._append_attributes(self.config.message_attributes.get(fq_name))

    def _append_enum_attributes(self, fq_name: str) -> None:
        self._check_fq(fq_name)
        self._append_attributes(self.config.enum_attributes.get(fq_name))

    def _append_field_attributes(self, fq_name: str, field_name: str) -> None:
        self._check_fq(fq_name)
        self._append_attributes(self.config.field_attributes.get_field(fq_name, field_name))

    def _location(self) -> descriptor_pb2.SourceCodeInfo.Location | None:
        if self._locations is None:
            return None
        try:
            return self._locations[tuple(self._path)]
        except KeyError:
            raise LookupError(f"no source location for path {self._path}") from None

    def _append_doc(self, fq_name: str, field_name: str | None) -> None:
        if field_name is not None:
            disabled = _any(self.config.disabled_comments.get_field(fq_name, field_name))
        else:
            disabled = _any(self.config.disabled_comments.get(fq_name))
        if disabled:
            return
        location = self._location()
        if location is not None:
            self._buf.append(Comments.from_location(location).append_with_indent(self._depth))

    def _is_boxed_path(self, fq_name: str, field_name: str) -> bool:
        return _any(self.config.boxed_paths.get_field(fq_name, field_name))

    # Messages.

    def _append_message(self, message: descriptor_pb2.DescriptorProto) -> None:
        _log.debug("  message: %r", message.name)
        message_name = message.name
        fq_message_name = self._fq_name(message_name)

        if self.extern_paths.resolve_ident(fq_message_name) is not None:
            return

        nested_types: list[tuple[descriptor_pb2.DescriptorProto, int]] = []
        map_types: dict[str, tuple[_F, _F]] = {}
        for idx, nested in enumerate(message.nested_type):
            if nested.HasField("options") and nested.options.map_entry:
                key, value = nested.field[0], nested.field[1]
                if key.name != "key" or value.name != "value":
                    raise ValueError(f"malformed map entry type: {nested.name}")
                map_types[f"{fq_message_name}.{nested.name}"] = (key, value)
            else:
                nested_types.append((nested, idx))

        fields: list[tuple[_F, int]] = []
        oneof_fields: dict[int, list[tuple[_F, int]]] = {}
        for idx, field in enumerate(message.field):
            if field.proto3_optional or not field.HasField("oneof_index"):
                fields.append((field, idx))
            else:
                oneof_fields.setdefault(field.oneof_index, []).append((field, idx))

        self._append_doc(fq_message_name, None)
        self._append_type_attributes(fq_message_name)
        self._append_message_attributes(fq_message_name)
        self._push_indent()
        self._buf.append(_ALLOW_EQ)
        self._buf.append(f"#[derive(Clone, PartialEq, {self._prost_path}::Message)]\n")
        self._write_line(f"pub struct {to_upper_camel(message_name)} {{")

        self._depth += 1
        self._path.append(2)
        for field, idx in fields:
            self._path.append(idx)
            entry = map_types.get(field.type_name) if field.HasField("type_name") else None
            if entry is not None:
                self._append_map_field(fq_message_name, field, *entry)
            else:
                self._append_field(fq_message_name, field)
            self._path.pop()
        self._path.pop()

        self._path.append(8)
        for idx, oneof in enumerate(message.oneof_decl):
            members = oneof_fields.get(idx)
            if members is None:
                continue
            self._path.append(idx)
            self._append_oneof_field(message_name, fq_message_name, oneof, members)
            self._path.pop()
        self._path.pop()

        self._depth -= 1
        self._write_line("}")

        if message.enum_type or nested_types or oneof_fields:
            self._push_mod(message_name)
            self._path.append(3)
            for nested, idx in nested_types:
                self._path.append(idx)
                self._append_message(nested)
                self._path.pop()
            self._path.pop()

            self._path.append(4)
            for idx, nested_enum in enumerate(message.enum_type):
                self._path.append(idx)
                self._append_enum(nested_enum)
                self._path.pop()
            self._path.pop()

            for idx, oneof in enumerate(message.oneof_decl):
                # Optional fields create a synthetic oneof that is skipped here.
                members = oneof_fields.pop(idx, None)
                if members is None:
                    continue
                self._append_oneof(fq_message_name, oneof, idx, members)

            self._pop_mod()

    def _optional(self, field: _F) -> bool:
        if field.proto3_optional:
            return True
        if field.label != _F.LABEL_OPTIONAL:
            return False
        if field.type == _F.TYPE_MESSAGE:
            return True
        return self.syntax is _Syntax.PROTO2

    @staticmethod
    def _deprecated(field: _F) -> bool:
        return field.HasField("options") and field.options.deprecated

    def _append_field(self, fq_message_name: str, field: _F) -> None:
        field_type = field.type
        repeated = field.label == _F.LABEL_REPEATED
        optional = self._optional(field)
        resolver = self._resolver
        ty = resolver.resolve_type(field, fq_message_name)

        boxed = (
            not repeated
            and field_type in (_F.TYPE_MESSAGE, _F.TYPE_GROUP)
            and self.message_graph.is_nested(field.type_name, fq_message_name)
        ) or self._is_boxed_path(fq_message_name, field.name)

        _log.debug("    field: %r, type: %r, boxed: %s", field.name, ty, boxed)

        self._append_doc(fq_message_name, field.name)

        if self._deprecated(field):
            self._write_line("#[deprecated]")

        self._push_indent()
        parts = ["#[prost(", resolver.field_type_tag(field)]

        if field_type == _F.TYPE_BYTES:
            bytes_type = (
                self.config.bytes_types.get_first_field(fq_message_name, field.name)
                or BytesType.VEC
            )
            parts.append(f'="{bytes_type_annotation(bytes_type)}"')

        if field.label == _F.LABEL_OPTIONAL:
            if optional:
                parts.append(", optional")
        elif field.label == _F.LABEL_REQUIRED:
            parts.append(", required")
        elif field.label == _F.LABEL_REPEATED:
            parts.append(", repeated")
            packed = (
                field.options.packed
                if field.HasField("options")
                else self.syntax is _Syntax.PROTO3
            )
            if can_pack(field) and not packed:
                parts.append(', packed="false"')

        if boxed:
            parts.append(", boxed")
        parts.append(f', tag="{field.number}')

        if field.HasField("default_value"):
            default = field.default_value
            parts.append('", default="')
            if field_type == _F.TYPE_BYTES:
                parts.append('b\\"')
                parts.append(escape_bytes_default(unescape_c_escape_string(default)))
                parts.append('\\"')
            elif field_type == _F.TYPE_ENUM:
                enum_value = to_upper_camel(default)
                if self.config.strip_enum_prefix:
                    enum_type = field.type_name.split(".")[-1]
                    enum_value = strip_enum_prefix(to_upper_camel(enum_type), enum_value)
                parts.append(enum_value)
            else:
                parts.append(_escape_default(default))

        parts.append('")]\n')
        self._buf.append("".join(parts))
        self._append_field_attributes(fq_message_name, field.name)

        prost = self._prost_path
        if boxed:
            ty = f"{prost}::alloc::boxed::Box<{ty}>"
        if repeated:
            ty = f"{prost}::alloc::vec::Vec<{ty}>"
        elif optional:
            ty = f"::core::option::Option<{ty}>"
        self._write_line(f"pub {to_snake(field.name)}: {ty},")

    def _append_map_field(self, fq_message_name: str, field: _F, key: _F, value: _F) -> None:
        resolver = self._resolver
        key_ty = resolver.resolve_type(key, fq_message_name)
        value_ty = resolver.resolve_type(value, fq_message_name)
        _log.debug(
            "    map field: %r, key type: %r, value type: %r", field.name, key_ty, value_ty
        )

        self._append_doc(fq_message_name, field.name)
        map_type = (
            self.config.map_types.get_first_field(fq_message_name, field.name)
            or MapType.HASH_MAP
        )
        key_tag = resolver.field_type_tag(key)
        value_tag = resolver.map_value_type_tag(value)
        self._write_line(
            f'#[prost({map_type_annotation(map_type)}="{key_tag}, {value_tag}", '
            f'tag="{field.number}")]'
        )
        self._append_field_attributes(fq_message_name, field.name)
        self._write_line(
            f"pub {to_snake(field.name)}: {map_type_rust_type(map_type)}<{key_ty}, {value_ty}>,"
        )

    # Oneofs.

    def _append_oneof_field(
        self,
        message_name: str,
        fq_message_name: str,
        oneof: descriptor_pb2.OneofDescriptorProto,
        fields: list[tuple[_F, int]],
    ) -> None:
        name = f"{to_snake(message_name)}::{to_upper_camel(oneof.name)}"
        self._append_doc(fq_message_name, None)
        tags = ", ".join(str(field.number) for field, _ in fields)
        self._write_line(f'#[prost(oneof="{name}", tags="{tags}")]')
        self._append_field_attributes(fq_message_name, oneof.name)
        self._write_line(f"pub {to_snake(oneof.name)}: ::core::option::Option<{name}>,")

    def _append_oneof(
        self,
        fq_message_name: str,
        oneof: descriptor_pb2.OneofDescriptorProto,
        idx: int,
        fields: list[tuple[_F, int]],
    ) -> None:
        self._path += [8, idx]
        self._append_doc(fq_message_name, None)
        del self._path[-2:]

        oneof_name = f"{fq_message_name}.{oneof.name}"
        self._append_type_attributes(oneof_name)
        self._append_enum_attributes(oneof_name)
        self._push_indent()
        self._buf.append(_ALLOW_EQ)
        self._buf.append(f"#[derive(Clone, PartialEq, {self._prost_path}::Oneof)]\n")
        self._write_line(f"pub enum {to_upper_camel(oneof.name)} {{")

        self._path.append(2)
        self._depth += 1
        resolver = self._resolver
        for field, field_idx in fields:
            self._path.append(field_idx)
            self._append_doc(fq_message_name, field.name)
            self._path.pop()

            self._write_line(
                f'#[prost({resolver.field_type_tag(field)}, tag="{field.number}")]'
            )
            self._append_field_attributes(oneof_name, field.name)

            ty = resolver.resolve_type(field, fq_message_name)
            boxed = (
                field.type in (_F.TYPE_MESSAGE, _F.TYPE_GROUP)
                and self.message_graph.is_nested(field.type_name, fq_message_name)
            ) or self._is_boxed_path(oneof_name, field.name)
            _log.debug("    oneof: %r, type: %r, boxed: %s", field.name, ty, boxed)

            if boxed:
                ty = f"::prost::alloc::boxed::Box<{ty}>"
            self._write_line(f"{to_upper_camel(field.name)}({ty}),")
        self._depth -= 1
        self._path.pop()

        self._write_line("}")

    # Enums.

    def _append_enum(self, desc: descriptor_pb2.EnumDescriptorProto) -> None:
        _log.debug("  enum: %r", desc.name)
        enum_name = to_upper_camel(desc.name)
        fq_enum_name = self._fq_name(desc.name)
        if self.extern_paths.resolve_ident(fq_enum_name) is not None:
            return

        self._append_doc(fq_enum_name, None)
        self._append_type_attributes(fq_enum_name)
        self._append_enum_attributes(fq_enum_name)
        self._write_line(
            "#[derive(Clone, Copy, Debug, PartialEq, Eq, Hash, PartialOrd, Ord, "
            f"{self._prost_path}::Enumeration)]"
        )
        self._write_line("#[repr(i32)]")
        self._write_line(f"pub enum {enum_name} {{")

        mappings = build_enum_value_mappings(
            enum_name, self.config.strip_enum_prefix, desc.value
        )

        self._depth += 1
        self._path.append(2)
        for variant in mappings:
            self._path.append(variant.path_idx)
            self._append_doc(fq_enum_name, variant.proto_name)
            self._append_field_attributes(fq_enum_name, variant.proto_name)
            self._write_line(f"{variant.generated_variant_name} = {variant.proto_number},")
            self._path.pop()
        self._path.pop()
        self._depth -= 1

        self._write_line("}")
        self._buf.append(render_enum_impl(enum_name, mappings, self._depth))

    # Services.

    def _push_service(self, service: descriptor_pb2.ServiceDescriptorProto) -> None:
        name = service.name
        _log.debug("  service: %r", name)
        location = self._location()
        comments = Comments.from_location(location) if location is not None else Comments()
        resolver = self._resolver

        methods: list[Method] = []
        self._path.append(2)
        for idx, method in enumerate(service.method):
            _log.debug("  method: %r", method.name)
            self._path.append(idx)
            location = self._location()
            method_comments = (
                Comments.from_location(location) if location is not None else Comments()
            )
            self._path.pop()

            options = descriptor_pb2.MethodOptions()
            if method.HasField("options"):
                options.CopyFrom(method.options)
            methods.append(
                Method(
                    name=to_snake(method.name),
                    proto_name=method.name,
                    comments=method_comments,
                    input_type=resolver.resolve_ident(method.input_type),
                    output_type=resolver.resolve_ident(method.output_type),
                    input_proto_type=method.input_type,
                    output_proto_type=method.output_type,
                    options=options,
                    client_streaming=method.client_streaming,
                    server_streaming=method.server_streaming,
                )
            )
        self._path.pop()

        service_options = descriptor_pb2.ServiceOptions()
        if service.HasField("options"):
            service_options.CopyFrom(service.options)
        generated = Service(
            name=to_upper_camel(name),
            proto_name=name,
            package=self.package,
            comments=comments,
            methods=methods,
            options=service_options,
        )
        generator = self.config.generator
        if generator is not None:
            self._buf.append(generator.generate(generated))

    # Nested modules.

    def _push_mod(self, module: str) -> None:
        self._write_line(f"/// Nested message and enum types in `{module}`.")
        self._write_line(f"pub mod {to_snake(module)} {{")
        self.package += "." + module
        self._depth += 1

    def _pop_mod(self) -> None:
        self._depth -= 1
        self.package = self.package[: self.package.rindex(".")]
        self._write_line("}")