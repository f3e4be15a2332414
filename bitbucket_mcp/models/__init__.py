"""Data models for pull requests, commits, comments, pipelines (Pydantic)."""

from bitbucket_mcp.models.comment import Comment, CommentType, InlineAnchor
from bitbucket_mcp.models.commit import Commit
from bitbucket_mcp.models.page import Page, RemotePageParams
from bitbucket_mcp.models.pipeline import Pipeline, PipelineState, PipelineTarget, RawPipeline
from bitbucket_mcp.models.pull_request import (
    PullRequest,
    PullRequestDetails,
    PullRequestNotFound,
    PullRequestWithDiff,
    Reviewer,
)
from bitbucket_mcp.models.result import Failed, ItemResult, Ok
from bitbucket_mcp.models.selector import PullRequestByBranch, PullRequestById, PullRequestSelector

__all__ = [
    "Comment",
    "CommentType",
    "Commit",
    "Failed",
    "InlineAnchor",
    "ItemResult",
    "Ok",
    "Page",
    "Pipeline",
    "PipelineState",
    "PipelineTarget",
    "PullRequest",
    "PullRequestByBranch",
    "PullRequestById",
    "PullRequestDetails",
    "PullRequestNotFound",
    "PullRequestSelector",
    "PullRequestWithDiff",
    "RawPipeline",
    "RemotePageParams",
    "Reviewer",
]
