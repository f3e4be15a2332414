"""Pull request model and its derived views."""

from datetime import datetime

from pydantic import BaseModel, Field

from bitbucket_mcp.models.commit import Commit


class Reviewer(BaseModel):
    """Reviewer assigned to a pull request."""

    display_name: str
    approved: bool = False


class PullRequest(BaseModel):
    """Pull request as reported by Bitbucket (read-only here)."""

    id: int
    title: str
    description: str = ""
    state: str
    author: str
    created_on: datetime
    updated_on: datetime
    source_branch: str
    destination_branch: str
    html_url: str | None = None
    reviewers: list[Reviewer] = Field(default_factory=list)

    def to_payload(self) -> dict:
        """JSON-ready dict in the shape returned to tool callers."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "state": self.state,
            "author": self.author,
            "created_on": self.created_on.isoformat(),
            "updated_on": self.updated_on.isoformat(),
            "source_branch": self.source_branch,
            "destination_branch": self.destination_branch,
            "links": {"html": self.html_url},
        }


class PullRequestNotFound(BaseModel):
    """Branch search matched no pull request. A normal result, not an error."""

    source_branch: str

    @property
    def message(self) -> str:
        return f"No pull request found for source branch: {self.source_branch}"


class PullRequestDetails(BaseModel):
    """Pull request with reviewers and its commits.

    commits holds a single error string when the commit list could not be
    fetched.
    """

    pull_request: PullRequest
    commits: list[Commit | str] = Field(default_factory=list)
    include_diff: bool = False

    def to_payload(self) -> dict:
        data = self.pull_request.to_payload()
        data["reviewers"] = [r.model_dump() for r in self.pull_request.reviewers]
        data["commits"] = [
            c if isinstance(c, str) else c.to_payload(include_diff=self.include_diff) for c in self.commits
        ]
        return data


class PullRequestWithDiff(BaseModel):
    """Pull request with one consolidated diff for all of its changes."""

    pull_request: PullRequest
    diff: str | None = None
    include_diff: bool = True

    def to_payload(self) -> dict:
        data = self.pull_request.to_payload()
        data["reviewers"] = [r.model_dump() for r in self.pull_request.reviewers]
        if self.include_diff:
            data["diff"] = self.diff
        return data
