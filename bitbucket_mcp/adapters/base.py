"""Abstract interface to the remote repository service."""

from abc import ABC, abstractmethod
from typing import Any, List

from bitbucket_mcp.models import Comment, Commit, Page, PullRequest, RawPipeline, RemotePageParams


class RepositoryAdapter(ABC):
    """Read/write access to one repository's pull requests and pipelines.

    Every method is a single remote call (commit listing may follow
    continuation links) and raises UpstreamError on a non-2xx response.
    """

    @abstractmethod
    def get_pull_request(self, pr_id: int) -> PullRequest:
        """Fetch PR by id."""
        ...

    @abstractmethod
    def find_pull_requests_by_source_branch(self, source_branch: str) -> List[PullRequest]:
        """PRs whose source branch equals source_branch, in remote default order."""
        ...

    @abstractmethod
    def list_pull_requests(
        self,
        state: str,
        params: RemotePageParams,
        target_branch: str | None = None,
    ) -> Page[PullRequest]:
        """One page of PRs in the given state."""
        ...

    @abstractmethod
    def list_pr_commits(self, pr_id: int) -> List[Commit]:
        """Commits of a PR (without diffs)."""
        ...

    @abstractmethod
    def get_commit(self, commit_hash: str) -> Commit:
        """Fetch a single commit by hash."""
        ...

    @abstractmethod
    def get_commit_diff(self, commit_hash: str) -> str:
        """Unified diff of one commit."""
        ...

    @abstractmethod
    def get_pr_diff(self, pr_id: int) -> str:
        """Consolidated unified diff of a whole PR."""
        ...

    @abstractmethod
    def list_pr_comments(self, pr_id: int, params: RemotePageParams) -> Page[Comment]:
        """One page of a PR's comments (general and inline)."""
        ...

    @abstractmethod
    def create_pr_comment(self, pr_id: int, payload: dict[str, Any]) -> Comment:
        """Post a comment payload and return the comment as persisted."""
        ...

    @abstractmethod
    def list_pipelines(
        self,
        params: RemotePageParams,
        state: str | None = None,
        target_branch: str | None = None,
    ) -> Page[RawPipeline]:
        """One page of pipelines, newest first."""
        ...
