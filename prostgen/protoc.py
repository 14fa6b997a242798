"""Locating and running the Protocol Buffers compiler."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from collections.abc import Iterable
from pathlib import Path

from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

__all__ = [
    "ProtocError",
    "load_descriptor_set",
    "protoc_from_env",
    "protoc_include_from_env",
    "run_protoc",
]

_PathLike = str | os.PathLike[str]


class ProtocError(OSError):
    """protoc could not be found or run, or its output could not be read."""


def _os_specific_hint() -> str:
    if sys.platform == "darwin":
        return (
            "You could try running `brew install protobuf` or downloading it "
            "from the Protocol Buffers release page."
        )
    if sys.platform.startswith("linux"):
        return (
            "If you're on debian, try `apt-get install protobuf-compiler` or download it "
            "from the Protocol Buffers release page."
        )
    return (
        "You can download it from the Protocol Buffers release page or from your "
        "package manager."
    )


def protoc_from_env() -> Path:
    """Return the path of the protoc binary, from PROTOC or the search path."""
    configured = os.environ.get("PROTOC")
    if configured:
        return Path(configured)
    found = shutil.which("protoc")
    if found is not None:
        return Path(found)
    raise ProtocError(
        "Could not find `protoc` installation and this build cannot proceed without\n"
        "    this knowledge. If `protoc` is installed and it could not be found,\n"
        "    you can set the `PROTOC` environment variable with the specific path to your\n"
        "    installed `protoc` binary."
        + _os_specific_hint()
    )


def protoc_include_from_env() -> Path | None:
    """Return the Protobuf include directory named by PROTOC_INCLUDE, if set."""
    configured = os.environ.get("PROTOC_INCLUDE")
    if configured is None:
        return None
    include = Path(configured)
    if not include.exists():
        raise ProtocError(
            "PROTOC_INCLUDE environment variable points to non-existent directory "
            f"({str(include)!r})"
        )
    if not include.is_dir():
        raise ProtocError(
            "PROTOC_INCLUDE environment variable points to a non-directory file "
            f"({str(include)!r})"
        )
    return include


def run_protoc(
    protoc: _PathLike,
    protos: Iterable[_PathLike],
    includes: Iterable[_PathLike],
    protoc_args: Iterable[str],
    output_path: _PathLike,
) -> Path:
    """Run protoc to write a descriptor set for ``protos`` to ``output_path``."""
    output = Path(output_path)
    cmd: list[str] = [
        os.fspath(protoc),
        "--include_imports",
        "--include_source_info",
        "-o",
        os.fspath(output),
    ]
    for include in includes:
        if Path(include).exists():
            cmd += ["-I", os.fspath(include)]
    # The built-in include directory goes after the user's so they can override it.
    builtin = protoc_include_from_env()
    if builtin is not None:
        cmd += ["-I", os.fspath(builtin)]
    cmd += [str(arg) for arg in protoc_args]
    cmd += [os.fspath(proto) for proto in protos]

    try:
        result = subprocess.run(cmd, capture_output=True, check=False)
    except OSError as error:
        raise ProtocError(
            f"failed to invoke protoc (path: {os.fspath(protoc)!r}): {error}"
        ) from error
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        raise ProtocError(f"protoc failed: {stderr}")
    return output


def load_descriptor_set(path: _PathLike) -> descriptor_pb2.FileDescriptorSet:
    """Read and decode a FileDescriptorSet from ``path``."""
    try:
        data = Path(path).read_bytes()
    except OSError as error:
        raise ProtocError(
            f"unable to open file_descriptor_set_path: {os.fspath(path)!r}, OS: {error}"
        ) from error
    fds = descriptor_pb2.FileDescriptorSet()
    try:
        fds.ParseFromString(data)
    except DecodeError as error:
        raise ProtocError(f"invalid FileDescriptorSet: {error}") from error
    return fds