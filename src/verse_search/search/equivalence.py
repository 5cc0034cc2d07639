"""Equivalence grouping of characters into regex alternations.

A ``RegexToken`` is one literal, escaped at construction. A ``RegexGroup`` is
the set of tokens accepted at one position of a search word, e.g. ``c`` and
``ç`` when the two are declared equivalent.

Example:
    make_groups("abç", ["aåá", "cç"]) -> [(?:a|å|á), (?:b), (?:c|ç)]
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from verse_search.search.analyzers import tokenize


# Characters escaped with a backslash
REGEX_SPECIAL_CHARS = frozenset("$*.?+[]^&{}!<>|-\\()")

QUANTIFIERS = ("", "*", "?")


def escape_regex(text: str) -> str:
    return "".join("\\" + char if char in REGEX_SPECIAL_CHARS else char for char in tokenize(text))


@dataclass(frozen=True)
class RegexToken:
    """A literal usable inside a pattern. ``str()`` returns the escaped form."""

    text: str
    escaped: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "escaped", escape_regex(self.text))

    def __str__(self) -> str:
        return self.escaped


@dataclass(frozen=True)
class RegexGroup:
    """Alternation of interchangeable tokens occupying one position."""

    tokens: tuple[RegexToken, ...]
    quantifier: str = ""

    def __post_init__(self) -> None:
        if self.quantifier not in QUANTIFIERS:
            msg = f"Unsupported quantifier {self.quantifier!r}. Available: {QUANTIFIERS}"
            raise ValueError(msg)
        object.__setattr__(self, "tokens", tuple(self.tokens))

    @classmethod
    def of(cls, chars: Iterable[str], quantifier: str = "") -> RegexGroup:
        """Build a group with one token per distinct character, first-seen order."""
        return cls(tuple(RegexToken(char) for char in dict.fromkeys(chars)), quantifier)

    def __contains__(self, char: object) -> bool:
        return any(token.text == char for token in self.tokens)

    def with_quantifier(self, quantifier: str) -> RegexGroup:
        return RegexGroup(self.tokens, quantifier)

    def __str__(self) -> str:
        return "(?:" + "|".join(str(token) for token in self.tokens) + ")" + self.quantifier


def group_for(char: str, groups: Iterable[RegexGroup]) -> RegexGroup | None:
    """Return the first group containing ``char``, or None."""

    for group in groups:
        if char in group:
            return group
    return None


def class_of(char: str, equivalent: Sequence[str]) -> str | None:
    """Return the first equivalence class string that mentions ``char``."""

    for chars in equivalent:
        if char in chars:
            return chars
    return None


def make_groups(text: str, equivalent: Sequence[str] = ()) -> list[RegexGroup]:
    """Build one group per character of ``text``, in text order.

    A character found in one of the ``equivalent`` strings is matched by every
    character of the first such string; any other character only matches
    itself. Repeated characters share one group object.
    """

    class_groups = [RegexGroup.of(tokenize(chars)) for chars in equivalent]
    singletons: dict[str, RegexGroup] = {}
    groups: list[RegexGroup] = []
    for char in tokenize(text):
        group = group_for(char, class_groups)
        if group is None:
            group = singletons.setdefault(char, RegexGroup.of([char]))
        groups.append(group)
    return groups


def equivalence_classes(pairs: Iterable[tuple[str, str]]) -> list[str]:
    """Merge symmetric ``(x, y)`` equivalences into disjoint classes.

    Classes are the connected components of the pairs. Characters keep their
    first-seen order and a merged class takes the place of the earliest class
    it absorbed.
    """

    classes: list[list[str]] = []
    for left, right in pairs:
        touching = [index for index, chars in enumerate(classes) if left in chars or right in chars]
        if not touching:
            classes.append(list(dict.fromkeys([left, right])))
            continue
        merged: list[str] = []
        for index in touching:
            merged.extend(classes[index])
        merged.extend([left, right])
        for index in reversed(touching[1:]):
            del classes[index]
        classes[touching[0]] = list(dict.fromkeys(merged))
    return ["".join(chars) for chars in classes]
