"""Code generation options and the service generator interface."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from enum import Enum
from pathlib import Path
from typing import Generic, TypeVar

from prostgen.ast import Service

__all__ = ["BytesType", "Config", "MapType", "ServiceGenerator"]

T = TypeVar("T")


class MapType(Enum):
    """Collection type generated for Protobuf map fields."""

    HASH_MAP = "hash_map"
    BTREE_MAP = "btree_map"


class BytesType(Enum):
    """Collection type generated for Protobuf bytes fields."""

    VEC = "vec"
    BYTES = "bytes"


class ServiceGenerator(ABC):
    """Produces code for service definitions; each hook returns text to append."""

    @abstractmethod
    def generate(self, service: Service) -> str:
        """Return code for one service."""

    def finalize(self) -> str:
        """Return code appended once per .proto file."""
        return ""

    def finalize_package(self, package: str) -> str:
        """Return code appended once per Protobuf package."""
        return ""


def _path_matches(pattern: str, fq_path: str) -> bool:
    """Fully qualified patterns match by prefix, relative ones by suffix."""
    if pattern.startswith("."):
        return pattern == "." or fq_path == pattern or fq_path.startswith(pattern + ".")
    return fq_path == pattern or fq_path.endswith("." + pattern)


class _PathMap(Generic[T]):
    """Values keyed by Protobuf path matchers, kept in insertion order."""

    def __init__(self) -> None:
        self._entries: list[tuple[str, T]] = []

    def insert(self, path: str, value: T) -> None:
        self._entries.append((path, value))

    def clear(self) -> None:
        self._entries.clear()

    def get(self, fq_path: str) -> Iterator[T]:
        return (value for pattern, value in self._entries if _path_matches(pattern, fq_path))

    def get_first(self, fq_path: str) -> T | None:
        return next(self.get(fq_path), None)

    def get_field(self, fq_path: str, field: str) -> Iterator[T]:
        return self.get(f"{fq_path}.{field}")

    def get_first_field(self, fq_path: str, field: str) -> T | None:
        return next(self.get_field(fq_path, field), None)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"_PathMap({self._entries!r})"


def _as_paths(paths: str | Iterable[str]) -> list[str]:
    if isinstance(paths, str):
        return [paths]
    return [str(p) for p in paths]


class Config:
    """Options for Protobuf code generation; setters return the config for chaining."""

    def __init__(self) -> None:
        self.descriptor_set_path: Path | None = None
        self.generator: ServiceGenerator | None = None
        self.map_types: _PathMap[MapType] = _PathMap()
        self.bytes_types: _PathMap[BytesType] = _PathMap()
        self.type_attributes: _PathMap[str] = _PathMap()
        self.message_attributes: _PathMap[str] = _PathMap()
        self.enum_attributes: _PathMap[str] = _PathMap()
        self.field_attributes: _PathMap[str] = _PathMap()
        self.boxed_paths: _PathMap[None] = _PathMap()
        self.prost_types = True
        self.strip_enum_prefix = True
        self.output_dir: Path | None = None
        self.extern_paths: list[tuple[str, str]] = []
        self.default_package_file = "_"
        self.protoc_args: list[str] = []
        self.disabled_comments: _PathMap[None] = _PathMap()
        self.skip_protoc = False
        self.include_file_path: Path | None = None
        self.prost_crate_path: str | None = None
        self.fmt = True

    def btree_map(self, paths: str | Iterable[str]) -> Config:
        """Generate BTreeMap fields for map fields matching any of ``paths``."""
        self.map_types.clear()
        for path in _as_paths(paths):
            self.map_types.insert(path, MapType.BTREE_MAP)
        return self

    def bytes(self, paths: str | Iterable[str]) -> Config:
        """Generate Bytes fields for bytes fields matching any of ``paths``."""
        self.bytes_types.clear()
        for path in _as_paths(paths):
            self.bytes_types.insert(path, BytesType.BYTES)
        return self

    def field_attribute(self, path: str, attribute: str) -> Config:
        """Add an attribute before every matching field."""
        self.field_attributes.insert(path, attribute)
        return self

    def type_attribute(self, path: str, attribute: str) -> Config:
        """Add an attribute before every matching message, enum and oneof."""
        self.type_attributes.insert(path, attribute)
        return self

    def message_attribute(self, path: str, attribute: str) -> Config:
        """Add an attribute before every matching message."""
        self.message_attributes.insert(path, attribute)
        return self

    def enum_attribute(self, path: str, attribute: str) -> Config:
        """Add an attribute before every matching enum and oneof."""
        self.enum_attributes.insert(path, attribute)
        return self

    def boxed(self, path: str) -> Config:
        """Wrap matching fields in a Box."""
        self.boxed_paths.insert(path, None)
        return self

    def service_generator(self, service_generator: ServiceGenerator) -> Config:
        """Use ``service_generator`` for service definitions."""
        self.generator = service_generator
        return self

    def compile_well_known_types(self) -> Config:
        """Generate the well-known types instead of referring to prost_types."""
        self.prost_types = False
        return self

    def disable_comments(self, paths: str | Iterable[str]) -> Config:
        """Omit documentation comments on items matching any of ``paths``."""
        self.disabled_comments.clear()
        for path in _as_paths(paths):
            self.disabled_comments.insert(path, None)
        return self

    def extern_path(self, proto_path: str, rust_path: str) -> Config:
        """Declare an externally provided Protobuf package or type."""
        self.extern_paths.append((proto_path, rust_path))
        return self

    def file_descriptor_set_path(self, path: str | os.PathLike[str]) -> Config:
        """Write (or read, with skip_protoc_run) the descriptor set at ``path``."""
        self.descriptor_set_path = Path(path)
        return self

    def skip_protoc_run(self) -> Config:
        """Read the descriptor set from file_descriptor_set_path instead of running protoc."""
        self.skip_protoc = True
        return self

    def retain_enum_prefix(self) -> Config:
        """Keep the enum name prefix on variant names."""
        self.strip_enum_prefix = False
        return self

    def out_dir(self, path: str | os.PathLike[str]) -> Config:
        """Set the directory generated files are written to."""
        self.output_dir = Path(path)
        return self

    def default_package_filename(self, filename: str) -> Config:
        """Set the file name stem used for files without a package."""
        self.default_package_file = filename
        return self

    def prost_path(self, path: str) -> Config:
        """Set the path used when deriving Message for generated types."""
        self.prost_crate_path = path
        return self

    def protoc_arg(self, arg: str) -> Config:
        """Add an argument to the protoc invocation."""
        self.protoc_args.append(str(arg))
        return self

    def include_file(self, path: str | os.PathLike[str]) -> Config:
        """Also write a file that includes every generated module."""
        self.include_file_path = Path(path)
        return self

    def format(self, enabled: bool) -> Config:
        """Enable or disable formatting of generated code."""
        self.fmt = enabled
        return self

    def __repr__(self) -> str:
        return (
            "Config("
            f"file_descriptor_set_path={self.descriptor_set_path!r}, "
            f"service_generator={self.generator is not None}, "
            f"map_type={self.map_types!r}, "
            f"bytes_type={self.bytes_types!r}, "
            f"type_attributes={self.type_attributes!r}, "
            f"field_attributes={self.field_attributes!r}, "
            f"prost_types={self.prost_types}, "
            f"strip_enum_prefix={self.strip_enum_prefix}, "
            f"out_dir={self.output_dir!r}, "
            f"extern_paths={self.extern_paths!r}, "
            f"default_package_filename={self.default_package_file!r}, "
            f"protoc_args={self.protoc_args!r}, "
            f"disable_comments={self.disabled_comments!r}, "
            f"prost_path={self.prost_crate_path!r})"
        )