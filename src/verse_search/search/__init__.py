"""
Search-pattern compiler package.

This package turns search phrases into accent-insensitive regular expressions:
- analyzers: Code-point units and phrase words
- equivalence: Regex tokens, groups and equivalence grouping
- pattern: Compiled pattern structure and make_regex
- accents: Parsing of the accent-removal directive
"""

from verse_search.search.accents import AccentDirectiveError, SearchConfig, parse_config
from verse_search.search.analyzers import tokenize, words_of
from verse_search.search.equivalence import RegexGroup, RegexToken, group_for, make_groups
from verse_search.search.pattern import PatternOptions, RegexString, build_pattern, make_regex, make_regex_pattern


__all__ = [
    "AccentDirectiveError",
    "PatternOptions",
    "RegexGroup",
    "RegexString",
    "RegexToken",
    "SearchConfig",
    "build_pattern",
    "group_for",
    "make_groups",
    "make_regex",
    "make_regex_pattern",
    "parse_config",
    "tokenize",
    "words_of",
]
