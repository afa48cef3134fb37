"""Query Engine - search, sort and paginate student listings."""

from registrar.query.models import DashboardStats, Page, SortKey, SortOrder, StudentFilter
from registrar.query.views import (
    filter_students,
    page_count,
    paginate,
    query_students,
    sort_students,
    summarize_students,
)

__all__ = [
    "DashboardStats",
    "Page",
    "SortKey",
    "SortOrder",
    "StudentFilter",
    "filter_students",
    "page_count",
    "paginate",
    "query_students",
    "sort_students",
    "summarize_students",
]
