"""Paged results and the paging parameters sent to Bitbucket."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class RemotePageParams(BaseModel):
    """1-based page number and page length as Bitbucket expects them."""

    page: int
    pagelen: int

    def as_params(self) -> dict[str, int]:
        return {"page": self.page, "pagelen": self.pagelen}


class Page(BaseModel, Generic[T]):
    """One page of results.

    total_count is Bitbucket's advisory "size"; next and previous are its
    continuation links, passed through untouched.
    """

    total_count: int | None = None
    page: int
    page_length: int
    next: str | None = None
    previous: str | None = None
    values: list[T] = Field(default_factory=list)

    def envelope(self) -> dict:
        """Paging fields for a response body (values are added by the caller)."""
        return {
            "total_count": self.total_count,
            "page": self.page,
            "page_length": self.page_length,
            "next": self.next,
            "previous": self.previous,
        }
