"""Expand a resolved pull request with commits and diffs."""

import logging
from typing import List

from bitbucket_mcp.adapters.base import RepositoryAdapter
from bitbucket_mcp.errors import BitbucketError
from bitbucket_mcp.models import (
    Commit,
    Failed,
    PullRequest,
    PullRequestDetails,
    PullRequestWithDiff,
)
from bitbucket_mcp.services.batch import run_isolated

LOG = logging.getLogger("bitbucket_mcp.services.enrichment")


def enrich_details(
    adapter: RepositoryAdapter,
    pr: PullRequest,
    include_diff: bool = False,
    max_workers: int = 8,
    timeout: float | None = None,
) -> PullRequestDetails:
    """Attach the PR's commits and, if asked, each commit's diff.

    A failed commit listing leaves a single error string in place of the
    commits. A failed diff only affects its own commit.
    """
    try:
        commits = adapter.list_pr_commits(pr.id)
    except BitbucketError as e:
        LOG.warning("PR #%s: failed to fetch commits: %s", pr.id, e)
        return PullRequestDetails(
            pull_request=pr,
            commits=[f"Error fetching commits: {e}"],
            include_diff=include_diff,
        )

    if include_diff:
        commits = _with_commit_diffs(adapter, commits, max_workers, timeout)

    LOG.info("PR #%s: %s commits (diffs=%s)", pr.id, len(commits), include_diff)
    return PullRequestDetails(pull_request=pr, commits=commits, include_diff=include_diff)


def _with_commit_diffs(
    adapter: RepositoryAdapter,
    commits: List[Commit],
    max_workers: int,
    timeout: float | None,
) -> List[Commit]:
    results = run_isolated(
        lambda c: adapter.get_commit_diff(c.hash),
        commits,
        max_workers=max_workers,
        timeout=timeout,
    )
    enriched = []
    for commit, result in zip(commits, results):
        if isinstance(result, Failed):
            diff = f"Error fetching diff: {result.description}"
        else:
            diff = result.value
        enriched.append(commit.model_copy(update={"diff": diff}))
    return enriched


def enrich_diff(adapter: RepositoryAdapter, pr: PullRequest, include_diff: bool = True) -> PullRequestWithDiff:
    """Attach one consolidated diff for the whole PR.

    A failed fetch is embedded as an error string instead of raising.
    """
    if not include_diff:
        return PullRequestWithDiff(pull_request=pr, include_diff=False)
    try:
        diff = adapter.get_pr_diff(pr.id)
    except BitbucketError as e:
        LOG.warning("PR #%s: failed to fetch diff: %s", pr.id, e)
        diff = f"Error fetching diff: {e}"
    return PullRequestWithDiff(pull_request=pr, diff=diff, include_diff=True)
