"""Domain models for verse search.

Following Cosmic Python principles:
- Value Objects are immutable (frozen=True)
- No infrastructure dependencies

Field names are snake_case in Python and camelCase when serialized with
``by_alias=True``, matching the shape consumers of the store expect
(``docSet``, ``bookCode``).
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VerseReference(BaseModel):
    """Value object identifying one retrievable unit of text.

    ``verses`` is None for text tagged with a chapter but no verse (e.g. a
    chapter heading); ``chapter`` is None when the token carried no chapter.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    doc_set: str
    collection: str
    book_code: str
    chapter: str | None = None
    verses: str | None = None

    def __str__(self) -> str:
        location = self.chapter or ""
        if self.verses:
            location += f":{self.verses}"
        return f"{self.book_code} {location}".strip()


class SearchCandidate(BaseModel):
    """Value object for one unit of text returned by a verse provider."""

    model_config = ConfigDict(frozen=True)

    reference: VerseReference
    text: str


class VerseMatch(BaseModel):
    """Value object for a candidate confirmed against every search word.

    ``matches`` holds, per search word, the text that word matched.
    """

    model_config = ConfigDict(frozen=True)

    candidate: SearchCandidate
    matches: list[str] = Field(default_factory=list)
