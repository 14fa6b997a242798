"""Comment and service descriptors handed to code and service generators."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from google.protobuf import descriptor_pb2

__all__ = ["Comments", "Method", "Service", "get_lines"]

_RULE_URL = re.compile(r"https?://[^\s)]+")
_RULE_BRACKETS = re.compile(r"(\[)(\S+)(])")
_INDENT = "    "


def get_lines(comments: str | None) -> list[str]:
    """Split a comment block into lines, dropping a final empty line and CRs."""
    if not comments:
        return []
    parts = comments.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _should_indent(sanitized_line: str) -> bool:
    """A doc line gets a leading space unless it already starts with exactly one."""
    if not sanitized_line:
        return False
    return sanitized_line[0] != " " or sanitized_line[1:2] == " "


def _sanitize_line(line: str) -> str:
    """Wrap URLs in angle brackets and escape square brackets."""
    s = _RULE_URL.sub(r"<\g<0>>", line)
    s = _RULE_BRACKETS.sub(r"\\\1\2\\\3", s)
    if _should_indent(s):
        s = " " + s
    return s


@dataclass
class Comments:
    """Comments on a Protobuf item."""

    leading_detached: list[list[str]] = field(default_factory=list)
    leading: list[str] = field(default_factory=list)
    trailing: list[str] = field(default_factory=list)

    @classmethod
    def from_location(cls, location: Any) -> Comments:
        """Build comments from a source-code-info location."""
        return cls(
            leading_detached=[get_lines(c) for c in location.leading_detached_comments],
            leading=get_lines(location.leading_comments),
            trailing=get_lines(location.trailing_comments),
        )

    def append_with_indent(self, indent_level: int) -> str:
        """Render the comments as doc lines, four spaces per indent level."""
        indent = _INDENT * indent_level
        out: list[str] = []
        for block in self.leading_detached:
            out.extend(f"{indent}//{_sanitize_line(line)}\n" for line in block)
            out.append("\n")
        out.extend(f"{indent}///{_sanitize_line(line)}\n" for line in self.leading)
        if self.leading and self.trailing:
            out.append(f"{indent}///\n")
        out.extend(f"{indent}///{_sanitize_line(line)}\n" for line in self.trailing)
        return "".join(out)


@dataclass
class Method:
    """A service method descriptor."""

    name: str
    proto_name: str
    comments: Comments
    input_type: str
    output_type: str
    input_proto_type: str
    output_proto_type: str
    options: descriptor_pb2.MethodOptions = field(default_factory=descriptor_pb2.MethodOptions)
    client_streaming: bool = False
    server_streaming: bool = False


@dataclass
class Service:
    """A service descriptor."""

    name: str
    proto_name: str
    package: str
    comments: Comments
    methods: list[Method] = field(default_factory=list)
    options: descriptor_pb2.ServiceOptions = field(default_factory=descriptor_pb2.ServiceOptions)