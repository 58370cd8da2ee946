"""
Engine module - pure transformations with no I/O.

This module contains:
    - merge: dotted form entries <-> nested configuration records
    - pagination: page windows, cursor clamping and search/type filters
"""

from tsdb_console.engine.merge import (
    DELETE_SENTINEL,
    coerce_value,
    config_to_form_entries,
    flatten_form_to_config,
    get_path,
)
from tsdb_console.engine.pagination import (
    FilterCriteria,
    Page,
    PaginationState,
    compute_total_pages,
    filter_items,
    matches_tag,
    matches_text,
    paginate,
    serialize_item,
)

__all__ = [
    # Merge
    "DELETE_SENTINEL",
    "coerce_value",
    "config_to_form_entries",
    "flatten_form_to_config",
    "get_path",
    # Pagination
    "FilterCriteria",
    "Page",
    "PaginationState",
    "compute_total_pages",
    "filter_items",
    "matches_tag",
    "matches_text",
    "paginate",
    "serialize_item",
]
