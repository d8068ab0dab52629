"""
SQL builders for catalog queries.

Filters are accumulated as (fragment, params) pairs and rendered into a
WHERE clause plus a positional parameter list. User-supplied values only
ever travel as %s parameters; fragments are fixed SQL text.
"""

import re

from core.config import NUMERIC_ID_SEARCH_MAX_LEN
from core.params import normalize_search_text

TABLE = "movies"

# Database-side equivalent of normalize_search_text()
NORMALIZED_FILENAME = r"regexp_replace(lower(filename), '[._\s-]+', '', 'g')"

_DIGITS = re.compile(r"[0-9]+")


class SqlBuilder:
    """
    Ordered, conjunctive collection of SQL predicates.
    """

    def __init__(self):
        self._parts = []

    def add(self, fragment, *params):
        self._parts.append((fragment, params))
        return self

    def __bool__(self):
        return bool(self._parts)

    @property
    def fragments(self):
        return [fragment for fragment, _ in self._parts]

    @property
    def params(self):
        return [value for _, values in self._parts for value in values]

    def where(self):
        """
        Return (sql, params) for the WHERE clause, or ("", []) when empty.
        """
        if not self._parts:
            return "", []
        return "WHERE " + " AND ".join(self.fragments), self.params


def escape_like(text):
    return text.replace("\\", "\\\\").replace("%", "\\%")


def is_numeric_id_search(term, max_len=NUMERIC_ID_SEARCH_MAX_LEN):
    """
    Digit-only search terms shorter than max_len may be an original_id.
    """
    return bool(_DIGITS.fullmatch(term)) and len(term) < max_len


def build_movie_filters(query, numeric_id_max_len=NUMERIC_ID_SEARCH_MAX_LEN):
    """
    Build the filter set for a MovieQuery.

    An id lookup ignores every other filter. Otherwise search, quality and
    type are applied independently and combined with AND.
    """
    filters = SqlBuilder()

    if query.is_id_lookup:
        return filters.add("original_id = %s", query.id)

    term = (query.search or "").strip()
    if term:
        normalized = normalize_search_text(term)
        pattern = f"%{escape_like(normalized)}%"

        if is_numeric_id_search(term, numeric_id_max_len):
            # bound as text like the id lookup; the column type decides the cast
            filters.add(
                f"(original_id = %s OR {NORMALIZED_FILENAME} ILIKE %s)",
                term,
                pattern,
            )
        elif normalized:
            filters.add(f"{NORMALIZED_FILENAME} ILIKE %s", pattern)

    if query.quality:
        filters.add("quality = %s", query.quality)

    if query.type == "movies":
        filters.add("is_series = FALSE")
    elif query.type == "series":
        filters.add("is_series = TRUE")

    return filters


def build_count_query(filters):
    where, params = filters.where()
    return f"SELECT COUNT(*) AS total FROM {TABLE} {where}".rstrip(), params


def build_order_by(query):
    column = query.sort_column
    direction = query.sort_direction
    nulls = " NULLS LAST" if column == "size_bytes" else ""
    return f"ORDER BY {column} {direction}{nulls}, original_id {direction}"


def build_data_query(query, filters):
    """
    Return (sql, params) for the page of rows.

    Id lookups are capped to a single row and left unordered.
    """
    where, params = filters.where()
    sql = f"SELECT * FROM {TABLE} {where}".rstrip()

    if query.is_id_lookup:
        return f"{sql} LIMIT 1", params

    sql = f"{sql} {build_order_by(query)} LIMIT %s OFFSET %s"
    return sql, params + [query.limit, query.offset]
