"""Correlate pipeline runs back to pull requests.

The pull request id is read from the triggering commit message: the first
"#<digits>" token wins. This is a heuristic. Messages that never mention the
PR give no id, and an unrelated "#123" (an issue number, say) gives a wrong
one. Whether the first match is the right one has not been checked against
real commit-message conventions; treat pr_id as a hint only.
"""

import logging
import re
from typing import List

from bitbucket_mcp.adapters.base import RepositoryAdapter
from bitbucket_mcp.models import Failed, Page, Pipeline, RawPipeline
from bitbucket_mcp.services.batch import run_isolated

PR_REF_RE = re.compile(r"#(\d+)")

LOG = logging.getLogger("bitbucket_mcp.services.correlator")


def extract_pr_id(message: str | None) -> int | None:
    """Digits of the first "#<digits>" in message, or None."""
    if not message:
        return None
    match = PR_REF_RE.search(message)
    if match:
        return int(match.group(1))
    return None


def correlate(
    adapter: RepositoryAdapter,
    page: Page[RawPipeline],
    max_workers: int = 8,
    timeout: float | None = None,
) -> Page[Pipeline]:
    """Resolve each pipeline's commit message and derive its pr_id.

    Messages missing from the listing are looked up by commit hash
    concurrently; a failed lookup leaves message and pr_id empty. Output
    order matches input order.
    """
    messages = _commit_messages(adapter, page.values, max_workers, timeout)
    pipelines = [
        raw.to_public(commit_message=message, pr_id=extract_pr_id(message))
        for raw, message in zip(page.values, messages)
    ]
    return Page[Pipeline](**page.model_dump(exclude={"values"}), values=pipelines)


def _commit_messages(
    adapter: RepositoryAdapter,
    pipelines: List[RawPipeline],
    max_workers: int,
    timeout: float | None,
) -> List[str | None]:
    messages: List[str | None] = [p.target.commit_message or None for p in pipelines]
    missing = [i for i, p in enumerate(pipelines) if messages[i] is None and p.target.commit_hash]
    if not missing:
        return messages

    results = run_isolated(
        lambda i: adapter.get_commit(pipelines[i].target.commit_hash).message,
        missing,
        max_workers=max_workers,
        timeout=timeout,
    )
    for index, result in zip(missing, results):
        if isinstance(result, Failed):
            LOG.warning(
                "Pipeline #%s: commit %s lookup failed: %s",
                pipelines[index].run_number,
                pipelines[index].target.commit_hash,
                result.description,
            )
            continue
        messages[index] = result.value or None
    return messages
