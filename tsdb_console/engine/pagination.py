"""
Pagination windows and search/type filtering over in-memory collections.

The business tables fetch whole collections from the API and page through
them locally. ``PaginationState`` is the shared cursor; it keeps
``1 <= current_page <= total_pages`` after every change by clamping.
Filtering always runs before pagination.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any, Generic, TypeVar

from tsdb_console.core.exceptions import PaginationError

T = TypeVar("T")

DEFAULT_TAG_FIELD = "type"


def compute_total_pages(total_items: int, page_size: int) -> int:
    """Return ``max(1, ceil(total_items / page_size))``."""
    if page_size <= 0:
        raise PaginationError(field_name="page_size", value=page_size, reason="must be positive")
    if total_items < 0:
        raise PaginationError(field_name="total_items", value=total_items, reason="must not be negative")
    return max(1, -(-total_items // page_size))


@dataclass
class PaginationState:
    """Cursor shared by the paginated business tables."""

    current_page: int = 1
    page_size: int = 10
    total_items: int = 0

    def __post_init__(self) -> None:
        # Validates page_size and total_items
        compute_total_pages(self.total_items, self.page_size)
        self.clamp()

    @property
    def total_pages(self) -> int:
        return compute_total_pages(self.total_items, self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def clamp(self) -> int:
        """Pull current_page back inside [1, total_pages] and return it."""
        self.current_page = min(max(1, int(self.current_page)), self.total_pages)
        return self.current_page

    def reset(self) -> None:
        """Return to the first page."""
        self.current_page = 1

    def go_to(self, page: int) -> int:
        """Move to a page, clamped to the valid range."""
        self.current_page = page
        return self.clamp()

    def next_page(self) -> bool:
        """Advance one page. Returns False when already on the last page."""
        if not self.has_next:
            return False
        self.current_page += 1
        return True

    def previous_page(self) -> bool:
        """Go back one page. Returns False when already on the first page."""
        if not self.has_previous:
            return False
        self.current_page -= 1
        return True

    def set_page_size(self, page_size: int) -> None:
        """Change the page size and keep the current page valid."""
        compute_total_pages(self.total_items, page_size)
        self.page_size = page_size
        self.clamp()

    def update_total(self, total_items: int) -> None:
        """Record a new collection length and keep the current page valid."""
        compute_total_pages(total_items, self.page_size)
        self.total_items = total_items
        self.clamp()

    def window(self) -> tuple[int, int]:
        """Half-open index range of the current page."""
        start = (self.current_page - 1) * self.page_size
        end = min(start + self.page_size, self.total_items)
        return min(start, end), end

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_page": self.current_page,
            "page_size": self.page_size,
            "total_items": self.total_items,
            "total_pages": self.total_pages,
            "has_previous": self.has_previous,
            "has_next": self.has_next,
        }


@dataclass
class Page(Generic[T]):
    """One window of a collection plus the recomputed cursor."""

    items: list[T]
    current_page: int
    page_size: int
    total_items: int
    total_pages: int
    start_index: int
    end_index: int

    @property
    def is_empty(self) -> bool:
        return not self.items


def paginate(collection: Sequence[T], page: int, page_size: int) -> Page[T]:
    """Slice one page out of a collection.

    An out-of-range page is clamped to the nearest valid page before
    slicing, and the clamped value is reported as ``current_page``.
    """
    state = PaginationState(current_page=page, page_size=page_size, total_items=len(collection))
    start, end = state.window()
    return Page(
        items=list(collection[start:end]),
        current_page=state.current_page,
        page_size=state.page_size,
        total_items=state.total_items,
        total_pages=state.total_pages,
        start_index=start,
        end_index=end,
    )


# =============================================================================
# Filtering
# =============================================================================


def _as_mapping(item: Any) -> Any:
    # Only what the payload carried, so absent fields never match "null"
    if hasattr(item, "model_dump"):
        return item.model_dump(mode="json", exclude_unset=True)
    return item


def serialize_item(item: Any) -> str:
    """Compact JSON rendering of an item, used for free-text matching."""
    return json.dumps(_as_mapping(item), ensure_ascii=False, separators=(",", ":"), default=str)


def matches_text(item: Any, search: str) -> bool:
    """Case-insensitive substring match against the serialized item."""
    return search.lower() in serialize_item(item).lower()


def matches_tag(item: Any, value: str, tag_field: str = DEFAULT_TAG_FIELD) -> bool:
    """Equality match of one tag against ``value``."""
    data = _as_mapping(item)
    if not isinstance(data, Mapping):
        return False
    tags = data.get("tags") or {}
    return isinstance(tags, Mapping) and tags.get(tag_field) == value


def filter_items(
    items: Iterable[T],
    search: str | None = None,
    tag_value: str | None = None,
    tag_field: str = DEFAULT_TAG_FIELD,
) -> list[T]:
    """Apply the text predicate, then the tag predicate.

    Absent or empty predicates pass everything through.
    """
    result = list(items)
    if search:
        result = [item for item in result if matches_text(item, search)]
    if tag_value:
        result = [item for item in result if matches_tag(item, tag_value, tag_field)]
    return result


@dataclass(frozen=True)
class FilterCriteria:
    """Search and type filter currently applied to the data viewer."""

    search: str = ""
    tag_type: str = ""
    tag_field: str = field(default=DEFAULT_TAG_FIELD, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.search and not self.tag_type

    def apply(self, items: Iterable[T]) -> list[T]:
        return filter_items(items, self.search, self.tag_type, self.tag_field)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("tag_field")
        return data
