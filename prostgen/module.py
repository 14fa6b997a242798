"""Module paths for generated code derived from Protobuf package names."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from prostgen.ident import to_snake

__all__ = ["Module"]


@dataclass(frozen=True, order=True)
class Module:
    """A module path for a Protobuf package."""

    components: tuple[str, ...] = ()

    @classmethod
    def from_parts(cls, parts: Iterable[str]) -> Module:
        """Build a module path from its parts."""
        return cls(tuple(str(part) for part in parts))

    @classmethod
    def from_protobuf_package_name(cls, name: str) -> Module:
        """Build a module path from a package name, converting each part to snake case."""
        return cls(tuple(to_snake(part) for part in name.split(".") if part))

    def parts(self) -> tuple[str, ...]:
        """The parts of the path."""
        return self.components

    def part(self, idx: int) -> str:
        """The part at position ``idx``."""
        return self.components[idx]

    def to_file_name_or(self, default: str) -> str:
        """File name for the generated code; ``default`` names the root of an empty path."""
        root = ".".join(self.components) if self.components else default
        return root + ".rs"

    def to_partial_file_name(self, depth: int) -> str:
        """Join the parts up to and including position ``depth`` with dots."""
        if depth >= len(self.components) or depth < 0:
            raise IndexError(f"depth {depth} out of range for module {self}")
        return ".".join(self.components[: depth + 1])

    def __len__(self) -> int:
        return len(self.components)

    def __str__(self) -> str:
        return "::".join(self.components)