"""Search-word pattern compiler.

A search word is compiled into a ``RegexString``: the ordered groups of its
characters (see ``equivalence``), plus an optional run of ignorable characters
(typically combining accents) allowed around every group. The structure is
serialized once, by ``str()``, so escaping happens exactly once per literal.

Example:
    make_regex_pattern("am", ignore="x")
    -> "(?:x)*(?:a)(?:x)*(?:m)(?:x)*"
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import re
from typing import Any

from verse_search.search.analyzers import tokenize
from verse_search.search.equivalence import RegexGroup, class_of, make_groups


@dataclass(frozen=True)
class PatternOptions:
    """Options controlling how a search word is compiled."""

    equivalent: tuple[str, ...] = ()
    ignore: str = ""
    whole_line: bool = False
    capture: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "equivalent", tuple(self.equivalent))


@dataclass(frozen=True)
class RegexString:
    """Compiled pattern for one search word.

    ``ignore`` may recur zero or more times between adjacent groups; a run
    directly before the first or after the last group is absorbed into the
    match too. ``capture`` wraps the whole sequence in group 1, which then
    always equals group 0. ``whole_line`` anchors the pattern to the full
    input.
    """

    groups: tuple[RegexGroup, ...]
    ignore: RegexGroup | None = None
    capture: bool = False
    whole_line: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "groups", tuple(self.groups))

    def __str__(self) -> str:
        separator = str(self.ignore.with_quantifier("*")) if self.ignore and self.ignore.tokens else ""
        body = separator + separator.join(str(group) for group in self.groups) + separator
        if self.capture:
            body = f"({body})"
        if self.whole_line:
            body = f"^{body}$"
        return body

    def compile(self, flags: int = 0) -> re.Pattern[str]:
        return re.compile(str(self), flags)


def _mandatory_groups(phrase: str, options: PatternOptions) -> list[RegexGroup]:
    groups = make_groups(phrase, options.equivalent)
    if not options.ignore:
        return groups
    # Ignorable characters are covered by the ignore runs unless they belong
    # to an equivalence class, in which case the class must still match.
    kept = [
        group
        for char, group in zip(tokenize(phrase), groups, strict=True)
        if char not in options.ignore or class_of(char, options.equivalent) is not None
    ]
    return kept or groups


def build_pattern(phrase: str, options: PatternOptions | None = None, **overrides: Any) -> RegexString:
    """Build the pattern structure for ``phrase``."""

    options = replace(options or PatternOptions(), **overrides)
    ignore = RegexGroup.of(tokenize(options.ignore), "*") if options.ignore else None
    return RegexString(
        tuple(_mandatory_groups(phrase, options)),
        ignore=ignore,
        capture=options.capture,
        whole_line=options.whole_line,
    )


def make_regex_pattern(phrase: str, options: PatternOptions | None = None, **overrides: Any) -> str:
    """Return the pattern text for ``phrase``."""

    return str(build_pattern(phrase, options, **overrides))


def make_regex(phrase: str, options: PatternOptions | None = None, **overrides: Any) -> re.Pattern[str]:
    """Compile ``phrase`` into a regular expression.

    Args:
        phrase: Search word to compile.
        options: Base options; keyword ``overrides`` replace individual fields
            (``equivalent``, ``ignore``, ``whole_line``, ``capture``).

    Returns:
        Compiled pattern matching the phrase with equivalent characters
        interchangeable and ignorable characters skipped.
    """

    return build_pattern(phrase, options, **overrides).compile()
