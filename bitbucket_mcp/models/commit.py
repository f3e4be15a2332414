"""Commit in a pull request's history."""

from datetime import datetime

from pydantic import BaseModel


class Commit(BaseModel):
    """Commit with optional diff text (or a diff error description)."""

    hash: str
    message: str = ""
    author: str = ""
    date: datetime | None = None
    diff: str | None = None

    def to_payload(self, include_diff: bool = False) -> dict:
        """Dict for tool callers; the diff key is absent unless requested."""
        data = {
            "hash": self.hash,
            "message": self.message,
            "author": self.author,
            "date": self.date.isoformat() if self.date else None,
        }
        if include_diff:
            data["diff"] = self.diff
        return data
