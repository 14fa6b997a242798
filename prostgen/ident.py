"""Identifier case conversion for generated code."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from enum import Enum

__all__ = ["to_snake", "to_upper_camel"]

_RAW_KEYWORDS = frozenset(
    {
        # Strict keywords.
        "as", "break", "const", "continue", "else", "enum", "false",
        "fn", "for", "if", "impl", "in", "let", "loop", "match", "mod", "move", "mut",
        "pub", "ref", "return", "static", "struct", "trait", "true",
        "type", "unsafe", "use", "where", "while",
        "dyn",
        # Reserved keywords.
        "abstract", "become", "box", "do", "final", "macro", "override", "priv", "typeof",
        "unsized", "virtual", "yield",
        "async", "await", "try",
    }
)

# Keywords that cannot be written as raw identifiers; they get an underscore suffix.
_SUFFIXED_KEYWORDS = frozenset({"self", "super", "extern", "crate"})


class _WordMode(Enum):
    BOUNDARY = 0
    LOWERCASE = 1
    UPPERCASE = 2


def _split_segments(s: str) -> Iterator[str]:
    """Split on every non-alphanumeric character, keeping empty segments."""
    current: list[str] = []
    for c in s:
        if c.isalnum():
            current.append(c)
        else:
            yield "".join(current)
            current = []
    yield "".join(current)


def _words(s: str) -> Iterator[str]:
    """Yield the words of an identifier, splitting on case changes and separators."""
    for segment in _split_segments(s):
        start = 0
        mode = _WordMode.BOUNDARY
        for i, c in enumerate(segment):
            if i + 1 == len(segment):
                yield segment[start:]
                break
            nxt = segment[i + 1]
            if c.islower():
                next_mode = _WordMode.LOWERCASE
            elif c.isupper():
                next_mode = _WordMode.UPPERCASE
            else:
                next_mode = mode

            if next_mode is _WordMode.LOWERCASE and nxt.isupper():
                yield segment[start : i + 1]
                start = i + 1
                mode = _WordMode.BOUNDARY
            elif mode is _WordMode.UPPERCASE and c.isupper() and nxt.islower():
                yield segment[start:i]
                start = i
                mode = _WordMode.BOUNDARY
            else:
                mode = next_mode


def _convert(s: str, word: Callable[[str], str], separator: str) -> str:
    return separator.join(word(w) for w in _words(s))


def _capitalize(word: str) -> str:
    if not word:
        return ""
    return word[0].upper() + word[1:].lower()


def to_snake(s: str) -> str:
    """Convert a camelCase or SCREAMING_SNAKE_CASE name to a lower_snake field identifier."""
    ident = _convert(s, str.lower, "_")
    if ident in _RAW_KEYWORDS:
        return "r#" + ident
    if ident in _SUFFIXED_KEYWORDS:
        return ident + "_"
    return ident


def to_upper_camel(s: str) -> str:
    """Convert a snake_case name to an UpperCamel type identifier."""
    ident = _convert(s, _capitalize, "")
    if ident == "Self":
        ident += "_"
    return ident