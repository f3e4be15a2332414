"""Resolve a pull request from an id or a source branch name."""

import logging

from bitbucket_mcp.adapters.base import RepositoryAdapter
from bitbucket_mcp.errors import InvalidArgument
from bitbucket_mcp.models import (
    PullRequest,
    PullRequestByBranch,
    PullRequestById,
    PullRequestNotFound,
    PullRequestSelector,
)

LOG = logging.getLogger("bitbucket_mcp.services.resolver")


def selector_from_args(pr_id: int | None, source_branch: str | None) -> PullRequestSelector:
    """Build a selector from tool arguments.

    pr_id wins when both are given. Raises InvalidArgument when neither is.
    """
    if pr_id is not None:
        if pr_id < 1:
            raise InvalidArgument(f"pr_id must be a positive integer, got {pr_id}")
        return PullRequestById(pr_id=pr_id)
    if source_branch and source_branch.strip():
        return PullRequestByBranch(source_branch=source_branch.strip())
    raise InvalidArgument("Either source_branch or pr_id must be provided")


def resolve(adapter: RepositoryAdapter, selector: PullRequestSelector) -> PullRequest | PullRequestNotFound:
    """Return exactly one pull request, or PullRequestNotFound for an
    unmatched branch.

    Several PRs from the same branch: the first in Bitbucket's default
    order is taken, without further tie-break.
    """
    if isinstance(selector, PullRequestById):
        LOG.info("Fetching PR #%s", selector.pr_id)
        return adapter.get_pull_request(selector.pr_id)

    matches = adapter.find_pull_requests_by_source_branch(selector.source_branch)
    if not matches:
        LOG.info("No PR for source branch %s", selector.source_branch)
        return PullRequestNotFound(source_branch=selector.source_branch)
    if len(matches) > 1:
        LOG.debug(
            "%s PRs for source branch %s, using #%s",
            len(matches),
            selector.source_branch,
            matches[0].id,
        )
    return matches[0]
