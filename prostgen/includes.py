"""Rendering of the include file that pulls in every generated module."""

from __future__ import annotations

from collections.abc import Iterable

from prostgen.module import Module

__all__ = ["render_includes"]

_INDENT = "    "


def _line(depth: int, text: str) -> str:
    return f"{_INDENT * depth}{text}\n"


def _include_line(modname: str, use_out_dir_env: bool) -> str:
    if use_out_dir_env:
        return f'include!(concat!(env!("OUT_DIR"), "/{modname}.rs"));'
    return f'include!("{modname}.rs");'


def _write_includes(
    entries: list[Module], depth: int, use_out_dir_env: bool, out: list[str]
) -> int:
    """Append nested module declarations for ``entries``; return the includes written."""
    written = 0
    remaining = sorted(entries)
    while remaining:
        modident = remaining[0].part(depth)
        matching = [m for m in remaining if m.part(depth) == modident]
        remaining = [m for m in remaining if m.part(depth) != modident]

        out.append(_line(depth, f"pub mod {modident} {{"))
        deeper = [m for m in matching if len(m) > depth + 1]
        subwritten = _write_includes(deeper, depth + 1, use_out_dir_env, out)
        written += subwritten
        if subwritten != len(matching):
            modname = matching[0].to_partial_file_name(depth)
            out.append(_line(depth + 1, _include_line(modname, use_out_dir_env)))
            written += 1
        out.append(_line(depth, "}"))
    return written


def render_includes(modules: Iterable[Module], use_out_dir_env: bool) -> str:
    """Render nested module declarations including each generated file.

    With ``use_out_dir_env`` the includes are resolved against the OUT_DIR
    environment variable; otherwise they are relative to the include file.
    """
    entries = list(modules)
    for module in entries:
        if len(module) == 0:
            raise ValueError("cannot include a module without a package path")
    out: list[str] = []
    _write_includes(entries, 0, use_out_dir_env, out)
    return "".join(out)