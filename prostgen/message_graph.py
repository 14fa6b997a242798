"""Graph of message nesting used to detect recursive message types."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from google.protobuf import descriptor_pb2

__all__ = ["MessageGraph"]

_FieldProto = descriptor_pb2.FieldDescriptorProto


class MessageGraph:
    """Directed graph whose edges link a message to the non-repeated messages it holds."""

    def __init__(self, files: Iterable[descriptor_pb2.FileDescriptorProto]) -> None:
        self._edges: dict[str, set[str]] = {}
        for file in files:
            package = "." + file.package if file.HasField("package") else ""
            for message in file.message_type:
                self._add_message(package, message)

    def _node(self, name: str) -> set[str]:
        if not name.startswith("."):
            raise ValueError(f"message name is not fully qualified: {name!r}")
        return self._edges.setdefault(name, set())

    def _add_message(self, package: str, message: descriptor_pb2.DescriptorProto) -> None:
        name = f"{package}.{message.name}"
        targets = self._node(name)
        for field in message.field:
            if (
                field.type == _FieldProto.TYPE_MESSAGE
                and field.label != _FieldProto.LABEL_REPEATED
            ):
                self._node(field.type_name)
                targets.add(field.type_name)
        for nested in message.nested_type:
            self._add_message(name, nested)

    def is_nested(self, outer: str, inner: str) -> bool:
        """Return True if message type ``inner`` is reachable from ``outer``."""
        if outer not in self._edges or inner not in self._edges:
            return False
        seen = {outer}
        queue = deque([outer])
        while queue:
            current = queue.popleft()
            if current == inner:
                return True
            for target in self._edges[current] - seen:
                seen.add(target)
                queue.append(target)
        return False