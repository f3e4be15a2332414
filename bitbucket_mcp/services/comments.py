"""Read and write general and inline pull request comments."""

import logging
from typing import Any, Dict

from bitbucket_mcp.adapters.base import RepositoryAdapter
from bitbucket_mcp.models import Comment, Page, RemotePageParams

LOG = logging.getLogger("bitbucket_mcp.services.comments")


def list_comments(adapter: RepositoryAdapter, pr_id: int, params: RemotePageParams) -> Page[Comment]:
    """One page of the PR's comments, general and inline in one stream."""
    page = adapter.list_pr_comments(pr_id, params)
    LOG.info("PR #%s: %s comments on page %s", pr_id, len(page.values), params.page)
    return page


def general_comment_payload(text: str) -> Dict[str, Any]:
    return {"content": {"raw": text}}


def inline_comment_payload(text: str, file_path: str, line: int) -> Dict[str, Any]:
    """Anchor on the new side of the diff ("to" line)."""
    return {"content": {"raw": text}, "inline": {"path": file_path, "to": line}}


def add_general_comment(adapter: RepositoryAdapter, pr_id: int, text: str) -> Comment:
    """Post a general comment; returns the comment as Bitbucket stored it."""
    comment = adapter.create_pr_comment(pr_id, general_comment_payload(text))
    LOG.info("PR #%s: added comment %s", pr_id, comment.id)
    return comment


def add_inline_comment(adapter: RepositoryAdapter, pr_id: int, text: str, file_path: str, line: int) -> Comment:
    """Post a comment anchored to file_path:line."""
    comment = adapter.create_pr_comment(pr_id, inline_comment_payload(text, file_path, line))
    LOG.info("PR #%s: added inline comment %s on %s:%s", pr_id, comment.id, file_path, line)
    return comment
