"""Caller-facing operations: one method per tool, JSON-ready dicts out.

Argument validation happens before any remote call and raises
InvalidArgument. Errors from primary fetches propagate as UpstreamError;
secondary per-item failures are embedded in the returned payload.
"""

import logging
from typing import Any, Dict

from bitbucket_mcp.adapters.base import RepositoryAdapter
from bitbucket_mcp.config import BitbucketConfig
from bitbucket_mcp.errors import InvalidArgument
from bitbucket_mcp.models import PipelineState, PullRequestById, PullRequestNotFound
from bitbucket_mcp.services import comments as comment_service
from bitbucket_mcp.services.correlator import correlate
from bitbucket_mcp.services.enrichment import enrich_details, enrich_diff
from bitbucket_mcp.services.pagination import paginate
from bitbucket_mcp.services.resolver import resolve, selector_from_args

PR_STATES = ("OPEN", "MERGED", "DECLINED")
DEFAULT_PR_LIMIT = 50
DEFAULT_COMMENT_LIMIT = 50
DEFAULT_PIPELINE_LIMIT = 10

PR_ID_NOTE = (
    "pr_id is inferred from the first '#<number>' in the triggering commit message. "
    "It is advisory and may be missing or refer to something other than a pull request."
)

LOG = logging.getLogger("bitbucket_mcp.operations")


def _not_found_payload(search_method: str, not_found: PullRequestNotFound) -> Dict[str, Any]:
    return {"search_method": search_method, "message": not_found.message, "pull_request": None}


class BitbucketOperations:
    """Operations over one repository, backed by an injected adapter."""

    def __init__(self, adapter: RepositoryAdapter, config: BitbucketConfig) -> None:
        self._adapter = adapter
        self._max_workers = config.max_workers
        self._timeout = config.operation_timeout

    def list_pull_requests(
        self,
        state: str | None = None,
        limit: int | None = None,
        page: int | None = None,
        target_branch: str | None = None,
    ) -> Dict[str, Any]:
        state = state or "OPEN"
        if state not in PR_STATES:
            raise InvalidArgument(f"state must be one of {', '.join(PR_STATES)}, got {state}")
        params = paginate(1 if page is None else page, DEFAULT_PR_LIMIT if limit is None else limit)

        result = self._adapter.list_pull_requests(state, params, target_branch=target_branch)
        return {**result.envelope(), "pull_requests": [pr.to_payload() for pr in result.values]}

    def get_pr_details(
        self,
        source_branch: str | None = None,
        pr_id: int | None = None,
        include_diff: bool = False,
    ) -> Dict[str, Any]:
        selector = selector_from_args(pr_id, source_branch)
        pr = resolve(self._adapter, selector)
        if isinstance(pr, PullRequestNotFound):
            return _not_found_payload(selector.describe(), pr)

        details = enrich_details(
            self._adapter,
            pr,
            include_diff=include_diff,
            max_workers=self._max_workers,
            timeout=self._timeout,
        )
        return {"search_method": selector.describe(), "pull_request": details.to_payload()}

    def get_pr_diff(
        self,
        source_branch: str | None = None,
        pr_id: int | None = None,
        include_diff: bool = True,
    ) -> Dict[str, Any]:
        selector = selector_from_args(pr_id, source_branch)
        pr = resolve(self._adapter, selector)
        if isinstance(pr, PullRequestNotFound):
            return _not_found_payload(selector.describe(), pr)

        with_diff = enrich_diff(self._adapter, pr, include_diff=include_diff)
        return {"search_method": selector.describe(), "pull_request": with_diff.to_payload()}

    def add_pr_comment(self, pr_id: int, content: str) -> Dict[str, Any]:
        comment = comment_service.add_general_comment(self._adapter, pr_id, content)
        return {
            "pull_request_id": pr_id,
            "message": "Comment added successfully to pull request",
            "comment": comment.to_payload(),
        }

    def add_pr_inline_comment(self, pr_id: int, content: str, file_path: str, line: int) -> Dict[str, Any]:
        comment = comment_service.add_inline_comment(self._adapter, pr_id, content, file_path, line)
        return {
            "pull_request_id": pr_id,
            "message": "Inline comment added successfully to pull request",
            "comment": comment.to_payload(),
        }

    def view_pr_comments(
        self,
        source_branch: str | None = None,
        pr_id: int | None = None,
        limit: int | None = None,
        page: int | None = None,
    ) -> Dict[str, Any]:
        selector = selector_from_args(pr_id, source_branch)
        params = paginate(1 if page is None else page, DEFAULT_COMMENT_LIMIT if limit is None else limit)

        if isinstance(selector, PullRequestById):
            target_id = selector.pr_id
        else:
            pr = resolve(self._adapter, selector)
            if isinstance(pr, PullRequestNotFound):
                return _not_found_payload(selector.describe(), pr)
            target_id = pr.id

        result = comment_service.list_comments(self._adapter, target_id, params)
        return {
            "search_method": selector.describe(),
            "pull_request_id": target_id,
            **result.envelope(),
            "comments": [c.to_payload() for c in result.values],
        }

    def list_pipelines(
        self,
        state: str | None = None,
        limit: int | None = None,
        page: int | None = None,
        target_branch: str | None = None,
    ) -> Dict[str, Any]:
        if state is not None and state not in PipelineState.__members__:
            raise InvalidArgument(
                f"state must be one of {', '.join(PipelineState.__members__)}, got {state}",
            )
        params = paginate(1 if page is None else page, DEFAULT_PIPELINE_LIMIT if limit is None else limit)

        raw = self._adapter.list_pipelines(params, state=state, target_branch=target_branch)
        result = correlate(self._adapter, raw, max_workers=self._max_workers, timeout=self._timeout)
        LOG.info(
            "Listed %s pipelines, %s correlated to a PR",
            len(result.values),
            sum(1 for p in result.values if p.pr_id is not None),
        )
        return {
            **result.envelope(),
            "pr_id_note": PR_ID_NOTE,
            "pipelines": [p.to_payload() for p in result.values],
        }
