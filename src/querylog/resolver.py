"""
Placeholder-to-column resolution for rendered SQL.

Maps every ``?`` placeholder of a statement to the column it binds to by
pattern matching the text. This is not a SQL parser: identifiers must be
quoted (backticks by default, double quotes for PostgreSQL dialects such as
Redshift), and only ``UPDATE ... SET``, ``INSERT ... VALUES`` and ``WHERE``
predicates (``=`` and ``IN``) are recognised.

Known limitations: a ``WHERE`` inside a string literal splits the statement
early, multi-statement batches are not separated, and ``IN`` lists with
nested parentheses are not matched.
"""
import re
from functools import lru_cache
from typing import List, NamedTuple, Pattern

DEFAULT_QUOTE = "`"

_split_where_regex = re.compile(r"\bWHERE\b")
_update_regex = re.compile(r"UPDATE.*SET\s*(.*)", re.DOTALL)
_insert_regex = re.compile(r"INSERT.*\((.+?)\)\s*VALUES", re.DOTALL)


class _ColumnPatterns(NamedTuple):
    assignment: Pattern
    identifier: Pattern
    predicate: Pattern


@lru_cache(maxsize=None)
def _column_patterns(quote: str) -> _ColumnPatterns:
    if len(quote) != 1:
        raise ValueError(f"Identifier quote must be a single character, got {quote!r}")
    q = re.escape(quote)
    column = rf"{q}(\w+?){q}"
    return _ColumnPatterns(
        assignment=re.compile(rf"{column}\s*=\s*\?"),
        identifier=re.compile(column),
        predicate=re.compile(rf"{column}\s*(?:=\s*(\?)|IN\s*\(([?\s,]+)\))"),
    )


def _head_columns(head: str, patterns: _ColumnPatterns) -> List[str]:
    match = _update_regex.search(head)
    if match:
        return patterns.assignment.findall(match.group(1))
    match = _insert_regex.search(head)
    if match:
        return patterns.identifier.findall(match.group(1))
    return []


def _where_columns(tail: str, patterns: _ColumnPatterns) -> List[str]:
    columns = []
    for match in patterns.predicate.finditer(tail):
        count = sum((group or "").count("?") for group in match.groups()[1:])
        columns.extend([match.group(1)] * count)
    return columns


def resolve_columns(query: str, quote: str = DEFAULT_QUOTE) -> List[str]:
    """Return the column bound to each placeholder of ``query``, in order.

    Args:
        query: Rendered SQL using ``?`` placeholders and quoted identifiers
        quote: The character identifiers are quoted with

    Returns:
        List[str]: One column name per recognised placeholder. The list may be
        shorter than the number of bound arguments when the statement has a
        shape that is not recognised.

    Raises:
        ValueError: If ``quote`` is not a single character
    """
    patterns = _column_patterns(quote)
    segments = _split_where_regex.split(query)
    columns = _head_columns(segments[0], patterns)
    if len(segments) > 1:
        columns.extend(_where_columns(segments[1], patterns))
    return columns
