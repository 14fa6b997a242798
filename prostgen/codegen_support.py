"""Helpers shared by the code generator: escapes, enum prefixes and type names."""

from __future__ import annotations

import re

from google.protobuf import descriptor_pb2

from prostgen.config import BytesType, MapType

__all__ = [
    "bytes_type_annotation",
    "bytes_type_rust_type",
    "can_pack",
    "escape_bytes_default",
    "map_type_annotation",
    "map_type_rust_type",
    "strip_enum_prefix",
    "unescape_c_escape_string",
]

_FieldProto = descriptor_pb2.FieldDescriptorProto

_PACKABLE_TYPES = frozenset(
    {
        _FieldProto.TYPE_FLOAT,
        _FieldProto.TYPE_DOUBLE,
        _FieldProto.TYPE_INT32,
        _FieldProto.TYPE_INT64,
        _FieldProto.TYPE_UINT32,
        _FieldProto.TYPE_UINT64,
        _FieldProto.TYPE_SINT32,
        _FieldProto.TYPE_SINT64,
        _FieldProto.TYPE_FIXED32,
        _FieldProto.TYPE_FIXED64,
        _FieldProto.TYPE_SFIXED32,
        _FieldProto.TYPE_SFIXED64,
        _FieldProto.TYPE_BOOL,
        _FieldProto.TYPE_ENUM,
    }
)

_SIMPLE_ESCAPES = {
    ord("a"): 0x07,
    ord("b"): 0x08,
    ord("f"): 0x0C,
    ord("n"): 0x0A,
    ord("r"): 0x0D,
    ord("t"): 0x09,
    ord("v"): 0x0B,
    ord("\\"): 0x5C,
    ord("?"): 0x3F,
    ord("'"): 0x27,
    ord('"'): 0x22,
}

_OCTAL_DIGITS = frozenset(b"01234567")
_HEX_BYTE = re.compile(rb"\+?[0-9a-fA-F]+")


def unescape_c_escape_string(s: str) -> bytes:
    """Decode a C-escaped default value for a bytes field."""
    src = s.encode("utf-8")
    length = len(src)
    dst = bytearray()
    p = 0
    while p < length:
        if src[p] != ord("\\"):
            dst.append(src[p])
            p += 1
            continue
        p += 1
        if p == length:
            raise ValueError(
                f"invalid c-escaped default binary value ({s}): ends with '\\'"
            )
        c = src[p]
        if c in _SIMPLE_ESCAPES:
            dst.append(_SIMPLE_ESCAPES[c])
            p += 1
        elif c in _OCTAL_DIGITS:
            octal = 0
            for _ in range(3):
                if p < length and src[p] in _OCTAL_DIGITS:
                    octal = octal * 8 + (src[p] - ord("0"))
                    p += 1
                else:
                    break
            if octal > 0xFF:
                raise ValueError(
                    f"invalid c-escaped default binary value ({s}): octal value out of range"
                )
            dst.append(octal)
        elif c in (ord("x"), ord("X")):
            if p + 3 > length:
                raise ValueError(
                    f"invalid c-escaped default binary value ({s}): incomplete hex value"
                )
            digits = src[p + 1 : p + 3]
            if not _HEX_BYTE.fullmatch(digits):
                raise ValueError(
                    "invalid c-escaped default binary value "
                    f"({src[p:p + 2].decode('utf-8', 'replace')}): invalid hex value"
                )
            dst.append(int(digits, 16))
            p += 3
        else:
            raise ValueError(f"invalid c-escaped default binary value ({s}): invalid escape")
    return bytes(dst)


def _ascii_escape(byte: int) -> str:
    if byte == 0x09:
        return "\\t"
    if byte == 0x0D:
        return "\\r"
    if byte == 0x0A:
        return "\\n"
    if byte in (0x27, 0x22, 0x5C):
        return "\\" + chr(byte)
    if 0x20 <= byte <= 0x7E:
        return chr(byte)
    return f"\\x{byte:02x}"


def _char_escape(c: str) -> str:
    if c in "\\'\"":
        return "\\" + c
    return c


def escape_bytes_default(data: bytes) -> str:
    """Escape bytes for a byte-string literal inside a quoted attribute value."""
    return "".join(_char_escape(c) for byte in data for c in _ascii_escape(byte))


def strip_enum_prefix(prefix: str, name: str) -> str:
    """Strip an enum's type name from the front of a variant name, when it is a true prefix."""
    stripped = name.removeprefix(prefix)
    if stripped and stripped[0].isupper():
        return stripped
    return name


def can_pack(field: descriptor_pb2.FieldDescriptorProto) -> bool:
    """Return True if a repeated field of this type can be packed."""
    return field.type in _PACKABLE_TYPES


def map_type_annotation(map_type: MapType) -> str:
    """The field annotation for a map type."""
    return {MapType.HASH_MAP: "map", MapType.BTREE_MAP: "btree_map"}[map_type]


def map_type_rust_type(map_type: MapType) -> str:
    """The fully qualified collection type for a map type."""
    return {
        MapType.HASH_MAP: "::std::collections::HashMap",
        MapType.BTREE_MAP: "::prost::alloc::collections::BTreeMap",
    }[map_type]


def bytes_type_annotation(bytes_type: BytesType) -> str:
    """The field annotation for a bytes type."""
    return {BytesType.VEC: "vec", BytesType.BYTES: "bytes"}[bytes_type]


def bytes_type_rust_type(bytes_type: BytesType) -> str:
    """The fully qualified type for a bytes type."""
    return {
        BytesType.VEC: "::prost::alloc::vec::Vec<u8>",
        BytesType.BYTES: "::prost::bytes::Bytes",
    }[bytes_type]