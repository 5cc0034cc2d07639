"""Parsing of the accent-removal directive.

The directive is a whitespace-separated list of items:

- ``X>Y``: X and Y are interchangeable (the relation is symmetric)
- ``\\uXXXX``: the code point U+XXXX may be ignored
- ``\\uXXXX-\\uYYYY``: every code point in the inclusive range may be ignored

Example:
    parse_config(r"\\u0300-\\u036F á>a é>e")
    -> SearchConfig(ignore=<U+0300 through U+036F>, equivalent=("áa", "ée"))

Anything else is rejected with ``AccentDirectiveError`` so that a bad
directive fails when configuration is loaded rather than during a search.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from verse_search.search.equivalence import equivalence_classes


class AccentDirectiveError(ValueError):
    """Raised when an accent-removal directive cannot be parsed."""


_ESCAPE = r"\\u(?:([0-9A-Fa-f]{4})|\{([0-9A-Fa-f]{1,6})\})"
_RANGE_PATTERN = re.compile(rf"{_ESCAPE}(?:-{_ESCAPE})?")
_PAIR_PATTERN = re.compile(r"(\S)>(\S)")


@dataclass(frozen=True)
class SearchConfig:
    """Parsed ignore set and equivalence classes."""

    ignore: str = ""
    equivalent: tuple[str, ...] = ()


def _code_point(four: str | None, braced: str | None, item: str) -> int:
    value = int(four or braced or "", 16)
    if value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
        raise AccentDirectiveError(f"Invalid code point in accent directive item {item!r}")
    return value


def _ignored_range(item: str) -> str | None:
    match = _RANGE_PATTERN.fullmatch(item)
    if match is None:
        return None
    start = _code_point(match.group(1), match.group(2), item)
    if match.group(3) is None and match.group(4) is None:
        return chr(start)
    end = _code_point(match.group(3), match.group(4), item)
    if end < start:
        raise AccentDirectiveError(f"Reversed code point range in accent directive item {item!r}")
    return "".join(chr(value) for value in range(start, end + 1) if not 0xD800 <= value <= 0xDFFF)


def parse_directive(directive: str) -> tuple[str, list[tuple[str, str]]]:
    """Split a directive into its ignored characters and equivalence pairs."""

    ignored: list[str] = []
    pairs: list[tuple[str, str]] = []
    for item in directive.split():
        chars = _ignored_range(item)
        if chars is not None:
            ignored.append(chars)
            continue
        pair = _PAIR_PATTERN.fullmatch(item)
        if pair is not None:
            pairs.append((pair.group(1), pair.group(2)))
            continue
        raise AccentDirectiveError(f"Unrecognized accent directive item {item!r}")
    return "".join(dict.fromkeys("".join(ignored))), pairs


def parse_config(directive: str) -> SearchConfig:
    """Parse an accent directive into a ``SearchConfig``."""

    ignore, pairs = parse_directive(directive)
    return SearchConfig(ignore=ignore, equivalent=tuple(equivalence_classes(pairs)))
