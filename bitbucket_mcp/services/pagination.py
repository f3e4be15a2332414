"""Translate caller page requests to Bitbucket paging and back."""

from typing import Any, Dict, List, TypeVar

from bitbucket_mcp.errors import InvalidArgument
from bitbucket_mcp.models import Page, RemotePageParams

T = TypeVar("T")

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


def paginate(page: int, size: int) -> RemotePageParams:
    """Validate a 1-based page and a page size in [1, 100].

    Out-of-range values are rejected, never clamped.
    """
    if page < 1:
        raise InvalidArgument(f"page must be >= 1, got {page}")
    if not MIN_PAGE_SIZE <= size <= MAX_PAGE_SIZE:
        raise InvalidArgument(f"limit must be between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE}, got {size}")
    return RemotePageParams(page=page, pagelen=size)


def to_page_envelope(raw: Dict[str, Any], values: List[T], params: RemotePageParams) -> Page[T]:
    """Wrap parsed values with Bitbucket's paging metadata.

    next/previous are Bitbucket's own links, kept verbatim; size is the
    advisory total count.
    """
    return Page(
        total_count=raw.get("size"),
        page=params.page,
        page_length=params.pagelen,
        next=raw.get("next") or None,
        previous=raw.get("previous") or None,
        values=values,
    )
