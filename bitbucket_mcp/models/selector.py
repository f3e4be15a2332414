"""How a caller identifies a pull request: by id or by source branch."""

from typing import Literal

from pydantic import BaseModel


class PullRequestById(BaseModel):
    kind: Literal["pr_id"] = "pr_id"
    pr_id: int

    def describe(self) -> str:
        return f"pr_id: {self.pr_id}"


class PullRequestByBranch(BaseModel):
    kind: Literal["source_branch"] = "source_branch"
    source_branch: str

    def describe(self) -> str:
        return f"source_branch: {self.source_branch}"


PullRequestSelector = PullRequestById | PullRequestByBranch
