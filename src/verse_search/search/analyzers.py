"""Splitting of search phrases into words and character units.

Two granularities are needed when turning a search phrase into a matcher:
words (the phrase is searched word by word) and character units (each word is
compiled position by position). Character units are Unicode code points, so a
character outside the Basic Multilingual Plane is a single unit even though
UTF-16 stores it as a surrogate pair. No normalization is applied.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
import re
from typing import overload


class CharacterUnits(Sequence[str]):
    """Restartable view over the code points of a string.

    Iteration is lazy and can be repeated; ``len()`` is the number of code
    points, not the number of UTF-16 code units.
    """

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        self._text = text

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> CharacterUnits: ...

    def __getitem__(self, index: int | slice) -> str | CharacterUnits:
        if isinstance(index, slice):
            return CharacterUnits(self._text[index])
        return self._text[index]

    def __len__(self) -> int:
        return len(self._text)

    def __iter__(self) -> Iterator[str]:
        return iter(self._text)

    def __repr__(self) -> str:
        return f"CharacterUnits({self._text!r})"


_WORD = re.compile(r"\S+")


def tokenize(text: str) -> CharacterUnits:
    """Split text into character units (code points)."""

    return CharacterUnits(text)


def words_of(phrase: str) -> list[str]:
    """Split a search phrase into whitespace-delimited words.

    Leading, trailing and repeated whitespace produce no words, so a blank
    phrase yields an empty list.
    """

    return _WORD.findall(phrase)
