"""Shared fixtures: in-memory adapter and sample records."""

from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from bitbucket_mcp.adapters.base import RepositoryAdapter
from bitbucket_mcp.config import BitbucketConfig
from bitbucket_mcp.errors import BitbucketError, UpstreamError
from bitbucket_mcp.models import (
    Comment,
    Commit,
    InlineAnchor,
    Page,
    PipelineTarget,
    PullRequest,
    RawPipeline,
    RemotePageParams,
    Reviewer,
)

DT = datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


def make_pr(pr_id: int = 1, source_branch: str = "feature/login", **kwargs: Any) -> PullRequest:
    data = {
        "id": pr_id,
        "title": f"PR {pr_id}",
        "description": "Description",
        "state": "OPEN",
        "author": "Alice",
        "created_on": DT,
        "updated_on": DT,
        "source_branch": source_branch,
        "destination_branch": "main",
        "html_url": f"https://bitbucket.org/ws/repo/pull-requests/{pr_id}",
        "reviewers": [Reviewer(display_name="Bob", approved=True)],
    }
    data.update(kwargs)
    return PullRequest(**data)


def make_pipeline(run_number: int, commit_hash: str | None = None, message: str | None = None) -> RawPipeline:
    return RawPipeline(
        uuid=f"{{uuid-{run_number}}}",
        build_number=run_number,
        state="SUCCESSFUL",
        created_on=DT,
        completed_on=DT,
        run_number=run_number,
        duration_in_seconds=42,
        target=PipelineTarget(ref_type="branch", ref_name="main", commit_hash=commit_hash, commit_message=message),
        trigger={"type": "pipeline_trigger_push"},
        links={"self": {"href": "https://example"}},
    )


class FakeAdapter(RepositoryAdapter):
    """In-memory repository. Records every call; failures are injected per
    key."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.prs: Dict[int, PullRequest] = {}
        self.commits: Dict[int, List[Commit]] = {}
        self.commit_diffs: Dict[str, str] = {}
        self.pr_diffs: Dict[int, str] = {}
        self.commit_messages: Dict[str, str] = {}
        self.comments: Dict[int, List[Comment]] = {}
        self.pipelines: List[RawPipeline] = []
        self.failures: Dict[tuple, BitbucketError] = {}
        self.author = "Bot User"

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if call in self.failures:
            raise self.failures[call]

    def add_pr(self, pr: PullRequest) -> PullRequest:
        self.prs[pr.id] = pr
        return pr

    def get_pull_request(self, pr_id: int) -> PullRequest:
        self._record("get_pull_request", pr_id)
        if pr_id not in self.prs:
            raise UpstreamError(404, "Not Found", '{"error": {"message": "Not found"}}')
        return self.prs[pr_id]

    def find_pull_requests_by_source_branch(self, source_branch: str) -> List[PullRequest]:
        self._record("find_pull_requests_by_source_branch", source_branch)
        return [pr for pr in self.prs.values() if pr.source_branch == source_branch]

    def list_pull_requests(
        self,
        state: str,
        params: RemotePageParams,
        target_branch: str | None = None,
    ) -> Page[PullRequest]:
        self._record("list_pull_requests", state, params.page, params.pagelen, target_branch)
        values = [
            pr
            for pr in self.prs.values()
            if pr.state == state and (target_branch is None or pr.destination_branch == target_branch)
        ]
        return Page(total_count=len(values), page=params.page, page_length=params.pagelen, values=values)

    def list_pr_commits(self, pr_id: int) -> List[Commit]:
        self._record("list_pr_commits", pr_id)
        return list(self.commits.get(pr_id, []))

    def get_commit(self, commit_hash: str) -> Commit:
        self._record("get_commit", commit_hash)
        if commit_hash not in self.commit_messages:
            raise UpstreamError(404, "Not Found")
        return Commit(hash=commit_hash, message=self.commit_messages[commit_hash])

    def get_commit_diff(self, commit_hash: str) -> str:
        self._record("get_commit_diff", commit_hash)
        return self.commit_diffs[commit_hash]

    def get_pr_diff(self, pr_id: int) -> str:
        self._record("get_pr_diff", pr_id)
        return self.pr_diffs[pr_id]

    def list_pr_comments(self, pr_id: int, params: RemotePageParams) -> Page[Comment]:
        self._record("list_pr_comments", pr_id, params.page, params.pagelen)
        stored = self.comments.get(pr_id, [])
        start = (params.page - 1) * params.pagelen
        return Page(
            total_count=len(stored),
            page=params.page,
            page_length=params.pagelen,
            values=stored[start : start + params.pagelen],
        )

    def create_pr_comment(self, pr_id: int, payload: Dict[str, Any]) -> Comment:
        self._record("create_pr_comment", pr_id)
        inline = payload.get("inline")
        stored = self.comments.setdefault(pr_id, [])
        comment = Comment(
            id=1000 + len(stored),
            content=payload["content"]["raw"],
            author=self.author,
            created_on=DT,
            updated_on=DT,
            inline=InlineAnchor(path=inline["path"], from_line=inline.get("from"), to_line=inline.get("to"))
            if inline
            else None,
        )
        stored.append(comment)
        return comment

    def list_pipelines(
        self,
        params: RemotePageParams,
        state: str | None = None,
        target_branch: str | None = None,
    ) -> Page[RawPipeline]:
        self._record("list_pipelines", params.page, params.pagelen, state, target_branch)
        values = self.pipelines[: params.pagelen]
        return Page(
            total_count=len(self.pipelines),
            page=params.page,
            page_length=params.pagelen,
            next="https://api.bitbucket.org/2.0/repositories/ws/repo/pipelines/?page=2",
            values=values,
        )


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def bitbucket_config() -> BitbucketConfig:
    return BitbucketConfig(
        username="user",
        password="app-pass",
        url="https://bitbucket.org/ws/repo",
        operation_timeout=10,
        max_workers=4,
    )
