# ABOUTME: Sort orders for listing books in the collection.
# ABOUTME: Title, author, date added, and publication year, each ascending or descending.

from collections.abc import Callable, Iterable
from typing import Any

from tome.db.mapping import BookRecord

SortKey = Callable[[BookRecord], Any]

SORT_KEYS: dict[str, SortKey] = {
    "title": lambda r: r.title.casefold(),
    "author": lambda r: r.metadata.author.casefold(),
    "added": lambda r: r.date_added,
    # Books with no known year sort as year 0.
    "year": lambda r: r.metadata.first_publish_year or 0,
}

DEFAULT_SORT = "added"


def sort_records(
    records: Iterable[BookRecord], by: str = DEFAULT_SORT, *, descending: bool = True
) -> list[BookRecord]:
    """Return records ordered by one of SORT_KEYS.

    Ties keep their incoming order, so a title-ordered catalog listing
    stays alphabetical within equal keys.

    Raises:
        ValueError: If ``by`` is not a known sort key.
    """
    try:
        key = SORT_KEYS[by]
    except KeyError:
        raise ValueError(
            f"Unknown sort order {by!r}; expected one of {', '.join(SORT_KEYS)}"
        ) from None
    return sorted(records, key=key, reverse=descending)
