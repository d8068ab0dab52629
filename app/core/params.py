"""
Request parameter normalization.

This module turns raw query-string values into a normalized MovieQuery.
Malformed input never raises: page and limit fall back to defaults and
unknown sort keys fall back to the last-updated column.
"""

import re
from dataclasses import dataclass
from typing import Optional

from core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

DEFAULT_SORT = "lastUpdated"
DEFAULT_SORT_DIR = "desc"

# Request sort key -> SQL column or expression
SORT_COLUMNS = {
    "id": "original_id",
    "filename": "lower(filename)",
    "size": "size_bytes",
    "quality": "quality",
    "lastUpdated": "last_updated_ts",
}
DEFAULT_SORT_COLUMN = "last_updated_ts"

# Separators ignored when comparing filenames: . _ - and whitespace
SEPARATOR_PATTERN = re.compile(r"[._\s-]+")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_int(value) -> Optional[int]:
    """
    Parse the leading integer of a value, ignoring trailing characters.

    "2" -> 2, " 3" -> 3, "1.9" -> 1, "7abc" -> 7, "abc" -> None.
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value

    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def parse_page(value) -> int:
    page = parse_int(value)
    if page is None or page < 1:
        return 1
    return page


def parse_limit(value) -> int:
    limit = parse_int(value)
    if limit is None:
        limit = DEFAULT_PAGE_SIZE
    return max(1, min(MAX_PAGE_SIZE, limit))


def resolve_sort_column(key) -> str:
    return SORT_COLUMNS.get(key, DEFAULT_SORT_COLUMN)


def resolve_sort_direction(value) -> str:
    if value is not None and str(value).lower() == "asc":
        return "ASC"
    return "DESC"


def normalize_search_text(text) -> str:
    """
    Canonical comparison form for filename search.

    Lower-cases and removes every run of separators, so that
    "The.Movie_2020", "the movie 2020" and "THE-MOVIE 2020" all become
    "themovie2020". The database applies the same transform to the
    stored filename at query time.
    """
    if not text:
        return ""
    return SEPARATOR_PATTERN.sub("", str(text).lower()).strip()


@dataclass(frozen=True)
class MovieQuery:
    """
    Normalized catalog request.

    Raw filter and sort values are kept as received so they can be echoed
    back in the response envelope.
    """

    search: Optional[str] = None
    quality: Optional[str] = None
    type: Optional[str] = None
    sort: str = DEFAULT_SORT
    sort_dir: str = DEFAULT_SORT_DIR
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    id: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        search=None,
        quality=None,
        type=None,
        sort=None,
        sort_dir=None,
        page=None,
        limit=None,
        id=None,
    ) -> "MovieQuery":
        return cls(
            search=search,
            quality=quality,
            type=type,
            sort=sort if sort is not None else DEFAULT_SORT,
            sort_dir=sort_dir if sort_dir is not None else DEFAULT_SORT_DIR,
            page=parse_page(page),
            limit=parse_limit(limit),
            id=id or None,
        )

    @property
    def is_id_lookup(self) -> bool:
        return bool(self.id)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def sort_column(self) -> str:
        return resolve_sort_column(self.sort)

    @property
    def sort_direction(self) -> str:
        return resolve_sort_direction(self.sort_dir)
