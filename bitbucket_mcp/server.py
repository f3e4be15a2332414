"""MCP tool surface.

Each tool forwards to BitbucketOperations. A BitbucketError becomes a
ToolError, which the MCP SDK returns to the caller with isError set.
"""

import logging
from typing import Any, Callable, Dict, Literal

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from bitbucket_mcp.errors import BitbucketError
from bitbucket_mcp.operations import BitbucketOperations

LOG = logging.getLogger("bitbucket_mcp.server")

PullRequestStateArg = Literal["OPEN", "MERGED", "DECLINED"]
PipelineStateArg = Literal["IN_PROGRESS", "SUCCESSFUL", "FAILED", "STOPPED", "SKIPPED", "PENDING", "ERROR"]


def _run(context: str, call: Callable[..., Dict[str, Any]], **kwargs: Any) -> Dict[str, Any]:
    try:
        return call(**kwargs)
    except BitbucketError as e:
        LOG.warning("%s: %s", context, e)
        raise ToolError(f"{context}: {e}") from e


def build_server(operations: BitbucketOperations, name: str = "mcp-bitbucket") -> FastMCP:
    """Register every tool against operations and return the server."""
    mcp = FastMCP(name)

    @mcp.tool()
    def list_pull_requests(
        state: PullRequestStateArg | None = None,
        limit: int | None = None,
        page: int | None = None,
        target_branch: str | None = None,
    ) -> dict:
        """List pull requests from the Bitbucket repository with filtering and pagination.

        Args:
            state: Filter PRs by state (defaults to OPEN).
            limit: Maximum number of PRs to return, 1-100 (defaults to 50).
            page: Page number, 1-based (defaults to 1).
            target_branch: Filter PRs by destination branch name.
        """
        return _run(
            "Error fetching pull requests",
            operations.list_pull_requests,
            state=state,
            limit=limit,
            page=page,
            target_branch=target_branch,
        )

    @mcp.tool()
    def get_pr_details(
        source_branch: str | None = None,
        pr_id: int | None = None,
        include_diff: bool = False,
    ) -> dict:
        """Get pull request details with reviewers, commit messages and optional per-commit diffs.

        Identify the PR by pr_id or by source_branch (pr_id wins if both are given).

        Args:
            source_branch: Source branch name to find the PR.
            pr_id: Pull request ID.
            include_diff: Include each commit's diff (defaults to false).
        """
        return _run(
            "Error fetching PR details",
            operations.get_pr_details,
            source_branch=source_branch,
            pr_id=pr_id,
            include_diff=include_diff,
        )

    @mcp.tool()
    def get_pr_diff(
        source_branch: str | None = None,
        pr_id: int | None = None,
        include_diff: bool = True,
    ) -> dict:
        """Get a pull request with one consolidated diff of all its changes.

        Args:
            source_branch: Source branch name to find the PR.
            pr_id: Pull request ID.
            include_diff: Include the diff (defaults to true).
        """
        return _run(
            "Error fetching PR diff",
            operations.get_pr_diff,
            source_branch=source_branch,
            pr_id=pr_id,
            include_diff=include_diff,
        )

    @mcp.tool()
    def add_pr_comment(pr_id: int, content: str) -> dict:
        """Add a general comment to a pull request.

        Args:
            pr_id: Pull request ID.
            content: Comment content (markdown).
        """
        return _run("Error adding PR comment", operations.add_pr_comment, pr_id=pr_id, content=content)

    @mcp.tool()
    def add_pr_inline_comment(pr_id: int, content: str, file_path: str, line: int) -> dict:
        """Add a comment anchored to a line of a file in the pull request's diff.

        Args:
            pr_id: Pull request ID.
            content: Comment content (markdown).
            file_path: Path of the file, relative to the repository root.
            line: Line number in the new version of the file.
        """
        return _run(
            "Error adding PR inline comment",
            operations.add_pr_inline_comment,
            pr_id=pr_id,
            content=content,
            file_path=file_path,
            line=line,
        )

    @mcp.tool()
    def view_pr_comments(
        source_branch: str | None = None,
        pr_id: int | None = None,
        limit: int | None = None,
        page: int | None = None,
    ) -> dict:
        """List general and inline comments of a pull request.

        Inline comments carry an "inline" block with path and from/to lines.

        Args:
            source_branch: Source branch name to find the PR.
            pr_id: Pull request ID.
            limit: Maximum number of comments to return, 1-100 (defaults to 50).
            page: Page number, 1-based (defaults to 1).
        """
        return _run(
            "Error fetching PR comments",
            operations.view_pr_comments,
            source_branch=source_branch,
            pr_id=pr_id,
            limit=limit,
            page=page,
        )

    @mcp.tool()
    def list_pipelines(
        state: PipelineStateArg | None = None,
        limit: int | None = None,
        page: int | None = None,
        target_branch: str | None = None,
    ) -> dict:
        """List pipelines, newest first, with the pull request each one likely belongs to.

        pr_id is guessed from the first '#<number>' in the triggering commit
        message; treat it as a hint, not a guaranteed link.

        Args:
            state: Filter pipelines by state.
            limit: Maximum number of pipelines to return, 1-100 (defaults to 10).
            page: Page number, 1-based (defaults to 1).
            target_branch: Filter pipelines by target branch name.
        """
        return _run(
            "Error fetching pipelines",
            operations.list_pipelines,
            state=state,
            limit=limit,
            page=page,
            target_branch=target_branch,
        )

    return mcp
