import pytest
from google.protobuf import descriptor_pb2

from prostgen.message_graph import MessageGraph

F = descriptor_pb2.FieldDescriptorProto


def message(name, *fields, nested=()):
    msg = descriptor_pb2.DescriptorProto(name=name)
    for field_name, type_name, label in fields:
        msg.field.add(
            name=field_name,
            number=len(msg.field) + 1,
            type=F.TYPE_MESSAGE,
            type_name=type_name,
            label=label,
        )
    msg.nested_type.extend(nested)
    return msg


def file(package, *messages):
    fd = descriptor_pb2.FileDescriptorProto(name="test.proto")
    if package is not None:
        fd.package = package
    fd.message_type.extend(messages)
    return fd


def test_self_recursive_message():
    graph = MessageGraph([file("pkg", message("A", ("a", ".pkg.A", F.LABEL_OPTIONAL)))])
    assert graph.is_nested(".pkg.A", ".pkg.A") is True


def test_co_recursive_messages():
    graph = MessageGraph(
        [
            file(
                "pkg",
                message("A", ("b", ".pkg.B", F.LABEL_OPTIONAL)),
                message("B", ("a", ".pkg.A", F.LABEL_OPTIONAL)),
            )
        ]
    )
    assert graph.is_nested(".pkg.B", ".pkg.A") is True
    assert graph.is_nested(".pkg.A", ".pkg.B") is True


def test_one_way_nesting():
    graph = MessageGraph(
        [file("pkg", message("A", ("b", ".pkg.B", F.LABEL_OPTIONAL)), message("B"))]
    )
    assert graph.is_nested(".pkg.A", ".pkg.B") is True
    assert graph.is_nested(".pkg.B", ".pkg.A") is False


def test_repeated_fields_add_no_edge():
    graph = MessageGraph([file("pkg", message("A", ("a", ".pkg.A", F.LABEL_REPEATED)))])
    assert graph.is_nested(".pkg.A", ".pkg.A") is True
    graph = MessageGraph(
        [file("pkg", message("A", ("b", ".pkg.B", F.LABEL_REPEATED)), message("B"))]
    )
    assert graph.is_nested(".pkg.A", ".pkg.B") is False


def test_unknown_messages_are_not_nested():
    graph = MessageGraph([file("pkg", message("A"))])
    assert graph.is_nested(".pkg.Missing", ".pkg.A") is False
    assert graph.is_nested(".pkg.A", ".pkg.Missing") is False


def test_nested_types_and_transitive_paths():
    inner = message("Inner", ("o", ".pkg.Outer", F.LABEL_OPTIONAL))
    outer = message("Outer", ("i", ".pkg.Outer.Inner", F.LABEL_REQUIRED), nested=[inner])
    graph = MessageGraph([file("pkg", outer)])
    assert graph.is_nested(".pkg.Outer.Inner", ".pkg.Outer") is True


def test_file_without_package():
    graph = MessageGraph([file(None, message("A", ("a", ".A", F.LABEL_OPTIONAL)))])
    assert graph.is_nested(".A", ".A") is True


def test_unqualified_field_type_rejected():
    with pytest.raises(ValueError):
        MessageGraph([file("pkg", message("A", ("b", "B", F.LABEL_OPTIONAL)))])