"""Mapping of Protobuf paths to externally provided types."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import chain

from prostgen.ident import to_snake, to_upper_camel

__all__ = ["ExternPathError", "ExternPaths", "validate_proto_path"]

_WELL_KNOWN_TYPES = (
    (".google.protobuf", "::prost_types"),
    (".google.protobuf.BoolValue", "bool"),
    (".google.protobuf.BytesValue", "::prost::alloc::vec::Vec<u8>"),
    (".google.protobuf.DoubleValue", "f64"),
    (".google.protobuf.Empty", "()"),
    (".google.protobuf.FloatValue", "f32"),
    (".google.protobuf.Int32Value", "i32"),
    (".google.protobuf.Int64Value", "i64"),
    (".google.protobuf.StringValue", "::prost::alloc::string::String"),
    (".google.protobuf.UInt32Value", "u32"),
    (".google.protobuf.UInt64Value", "u64"),
)


class ExternPathError(ValueError):
    """An extern path declaration is invalid."""


def validate_proto_path(path: str) -> None:
    """Raise ExternPathError unless ``path`` is a well-formed fully qualified path."""
    if not path.startswith("."):
        raise ExternPathError(
            "Protobuf paths must be fully qualified (begin with a leading '.'): " + path
        )
    if any(segment == "" for segment in path.split(".")[1:]):
        raise ExternPathError("invalid fully-qualified Protobuf path: " + path)


class ExternPaths:
    """Resolves Protobuf identifiers that are provided by external code."""

    def __init__(self, paths: Iterable[tuple[str, str]], prost_types: bool) -> None:
        self._paths: dict[str, str] = {}
        for proto_path, rust_path in paths:
            self._insert(proto_path, rust_path)
        if prost_types:
            for proto_path, rust_path in _WELL_KNOWN_TYPES:
                self._insert(proto_path, rust_path)

    def _insert(self, proto_path: str, rust_path: str) -> None:
        validate_proto_path(proto_path)
        if proto_path in self._paths:
            raise ExternPathError("duplicate extern Protobuf path: " + proto_path)
        self._paths[proto_path] = rust_path

    def resolve_ident(self, pb_ident: str) -> str | None:
        """Return the external path for a fully qualified identifier, or None."""
        if not pb_ident.startswith("."):
            raise ValueError(f"identifier is not fully qualified: {pb_ident!r}")

        exact = self._paths.get(pb_ident)
        if exact is not None:
            return exact

        idx = pb_ident.rfind(".")
        while idx >= 0:
            rust_path = self._paths.get(pb_ident[:idx])
            if rust_path is not None:
                segments = pb_ident[idx + 1 :].split(".")
                ident_type = to_upper_camel(segments.pop())
                parts = [
                    segment if position == 0 and segment == "crate" else to_snake(segment)
                    for position, segment in enumerate(
                        chain(rust_path.split("::"), segments)
                    )
                ]
                parts.append(ident_type)
                return "::".join(parts)
            idx = pb_ident.rfind(".", 0, idx)
        return None