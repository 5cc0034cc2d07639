"""GraphQL query text for the docSet store.

Search words are sent as regular expressions in a ``withMatchingChars``
filter; the store keeps documents and blocks containing a match for every
pattern.
"""

from __future__ import annotations

from collections.abc import Sequence

from verse_search.search.pattern import PatternOptions, make_regex_pattern


def quote_graphql_string(value: str) -> str:
    """Return ``value`` as a double-quoted GraphQL string literal."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def keyword_to_regex(
    word: str,
    whole_words: bool = False,
    ignore: str = "",
    equivalent: Sequence[str] = (),
) -> str:
    """Compile one search word to the pattern text sent to the store.

    With ``whole_words`` the pattern must match an entire word token.
    """
    return make_regex_pattern(word, PatternOptions(equivalent=tuple(equivalent), ignore=ignore, whole_line=whole_words))


def search_params(
    keywords: Sequence[str],
    whole_words: bool = False,
    ignore: str = "",
    equivalent: Sequence[str] = (),
) -> str:
    """Build the ``withMatchingChars`` filter argument for the search words."""
    terms = [quote_graphql_string(keyword_to_regex(word, whole_words, ignore, equivalent)) for word in keywords]
    return f"withMatchingChars: [{', '.join(terms)}]"


def books_query(doc_set: str, params: str) -> str:
    return f"""
        {{
            docSet(id: {quote_graphql_string(doc_set)}) {{
                documents({params} allChars: true sortedBy: "paratext") {{
                    id
                    idParts {{
                        type
                    }}
                }}
            }}
        }}
    """


def blocks_query(book_id: str, params: str) -> str:
    return f"""
        {{
            document(id: {quote_graphql_string(book_id)}) {{
                bookCode: header(id: "bookCode")
                mainSequence {{
                    blocks({params} allChars: true) {{
                        tokens(includeContext: true) {{
                            scopes(startsWith: ["chapter/" "verses/"])
                            payload
                        }}
                    }}
                }}
            }}
        }}
    """
