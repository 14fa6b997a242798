import json
import sys

import pytest
from google.protobuf import descriptor_pb2

from prostgen.protoc import (
    ProtocError,
    load_descriptor_set,
    protoc_from_env,
    protoc_include_from_env,
    run_protoc,
)


def _script(path, body):
    path.write_text(f"#!{sys.executable}\n{body}")
    path.chmod(0o755)
    return path


def test_protoc_from_env_uses_variable(monkeypatch, tmp_path):
    target = tmp_path / "my-protoc"
    monkeypatch.setenv("PROTOC", str(target))
    assert protoc_from_env() == target


def test_protoc_from_env_searches_path(monkeypatch, tmp_path):
    monkeypatch.delenv("PROTOC", raising=False)
    fake = _script(tmp_path / "protoc", "pass\n")
    monkeypatch.setenv("PATH", str(tmp_path))
    assert protoc_from_env().resolve() == fake.resolve()


def test_protoc_from_env_missing(monkeypatch, tmp_path):
    monkeypatch.delenv("PROTOC", raising=False)
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(ProtocError, match="PROTOC"):
        protoc_from_env()


def test_protoc_include_unset(monkeypatch):
    monkeypatch.delenv("PROTOC_INCLUDE", raising=False)
    assert protoc_include_from_env() is None


def test_protoc_include_directory(monkeypatch, tmp_path):
    monkeypatch.setenv("PROTOC_INCLUDE", str(tmp_path))
    assert protoc_include_from_env() == tmp_path


def test_protoc_include_nonexistent(monkeypatch, tmp_path):
    monkeypatch.setenv("PROTOC_INCLUDE", str(tmp_path / "missing"))
    with pytest.raises(ProtocError, match="non-existent directory"):
        protoc_include_from_env()


def test_protoc_include_not_a_directory(monkeypatch, tmp_path):
    file = tmp_path / "file.txt"
    file.write_text("x")
    monkeypatch.setenv("PROTOC_INCLUDE", str(file))
    with pytest.raises(ProtocError, match="non-directory file"):
        protoc_include_from_env()


def test_run_protoc_arguments(monkeypatch, tmp_path):
    monkeypatch.delenv("PROTOC_INCLUDE", raising=False)
    record = tmp_path / "argv.json"
    fake = _script(
        tmp_path / "fake-protoc",
        "import json, sys\n"
        f"with open({str(record)!r}, 'w') as f:\n"
        "    json.dump(sys.argv[1:], f)\n",
    )
    include = tmp_path / "inc"
    include.mkdir()
    out = tmp_path / "out.bin"
    result = run_protoc(
        fake,
        ["a.proto"],
        [include, tmp_path / "does-not-exist"],
        ["--experimental_allow_proto3_optional"],
        out,
    )
    assert result == out
    assert json.loads(record.read_text()) == [
        "--include_imports",
        "--include_source_info",
        "-o",
        str(out),
        "-I",
        str(include),
        "--experimental_allow_proto3_optional",
        "a.proto",
    ]


def test_run_protoc_appends_builtin_include_last(monkeypatch, tmp_path):
    builtin = tmp_path / "builtin"
    builtin.mkdir()
    monkeypatch.setenv("PROTOC_INCLUDE", str(builtin))
    record = tmp_path / "argv.json"
    fake = _script(
        tmp_path / "fake-protoc",
        "import json, sys\n"
        f"with open({str(record)!r}, 'w') as f:\n"
        "    json.dump(sys.argv[1:], f)\n",
    )
    user = tmp_path / "user"
    user.mkdir()
    run_protoc(fake, ["x.proto"], [user], [], tmp_path / "o.bin")
    argv = json.loads(record.read_text())
    assert argv.index(str(user)) < argv.index(str(builtin)) < argv.index("x.proto")


def test_run_protoc_failure(monkeypatch, tmp_path):
    monkeypatch.delenv("PROTOC_INCLUDE", raising=False)
    fake = _script(
        tmp_path / "fake-protoc",
        "import sys\nsys.stderr.write('boom')\nsys.exit(1)\n",
    )
    with pytest.raises(ProtocError, match="protoc failed: boom"):
        run_protoc(fake, ["a.proto"], [], [], tmp_path / "o.bin")


def test_run_protoc_missing_binary(monkeypatch, tmp_path):
    monkeypatch.delenv("PROTOC_INCLUDE", raising=False)
    with pytest.raises(ProtocError, match="failed to invoke protoc"):
        run_protoc(tmp_path / "nope", ["a.proto"], [], [], tmp_path / "o.bin")


def test_load_descriptor_set_round_trip(tmp_path):
    fds = descriptor_pb2.FileDescriptorSet()
    file = fds.file.add()
    file.name = "hello.proto"
    file.package = "helloworld"
    file.message_type.add().name = "Message"
    path = tmp_path / "set.bin"
    path.write_bytes(fds.SerializeToString())
    assert load_descriptor_set(path) == fds


def test_load_descriptor_set_missing(tmp_path):
    with pytest.raises(ProtocError, match="unable to open file_descriptor_set_path"):
        load_descriptor_set(tmp_path / "missing.bin")


def test_load_descriptor_set_invalid(tmp_path):
    path = tmp_path / "bad.bin"
    path.write_bytes(b"\x0a\x05ab")
    with pytest.raises(ProtocError, match="invalid FileDescriptorSet"):
        load_descriptor_set(path)