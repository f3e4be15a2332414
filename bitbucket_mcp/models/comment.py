"""General and inline pull request comments in one shape."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class CommentType(str, Enum):
    GENERAL = "general"
    INLINE = "inline"


class InlineAnchor(BaseModel):
    """File path and line range a comment is attached to."""

    path: str
    from_line: int | None = None
    to_line: int | None = None


class Comment(BaseModel):
    """Pull request comment.

    inline is None for general comments; it is never a zero-valued anchor.
    """

    id: int
    content: str
    author: str
    created_on: datetime
    updated_on: datetime | None = None
    inline: InlineAnchor | None = None
    html_url: str | None = None
    parent_id: int | None = None
    deleted: bool = False

    @property
    def type(self) -> CommentType:
        return CommentType.INLINE if self.inline is not None else CommentType.GENERAL

    def to_payload(self) -> dict:
        data = {
            "id": self.id,
            "content": self.content,
            "author": self.author,
            "created_on": self.created_on.isoformat(),
            "updated_on": self.updated_on.isoformat() if self.updated_on else None,
            "type": self.type.value,
            "links": {"html": self.html_url},
        }
        if self.inline is not None:
            data["inline"] = {
                "path": self.inline.path,
                "from": self.inline.from_line,
                "to": self.inline.to_line,
            }
        if self.parent_id is not None:
            data["parent_id"] = self.parent_id
        if self.deleted:
            data["deleted"] = True
        return data
