"""Run independent sub-fetches concurrently with isolated failures.

Results come back in input order regardless of completion order. A failed
item is reported as Failed(description) and never aborts its siblings.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, List, Sequence, TypeVar

from bitbucket_mcp.errors import BitbucketError
from bitbucket_mcp.models import Failed, ItemResult, Ok

T = TypeVar("T")
R = TypeVar("R")

LOG = logging.getLogger("bitbucket_mcp.services.batch")


def run_isolated(
    fn: Callable[[T], R],
    items: Sequence[T],
    max_workers: int = 8,
    timeout: float | None = None,
) -> List[ItemResult[R]]:
    """Apply fn to every item; one ItemResult per item, same order.

    BitbucketError raised by fn becomes Failed(str(error)). timeout bounds
    the whole batch: items unfinished at the deadline become Failed.
    """
    if not items:
        return []
    deadline = time.monotonic() + timeout if timeout is not None else None
    results: List[ItemResult[R]] = []
    executor = ThreadPoolExecutor(max_workers=min(max_workers, len(items)))
    try:
        futures = [executor.submit(fn, item) for item in items]
        for future in futures:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                results.append(Ok(future.result(timeout=remaining)))
            except FutureTimeout:
                future.cancel()
                results.append(Failed(f"timed out after {timeout}s"))
            except BitbucketError as e:
                results.append(Failed(str(e)))
    finally:
        # Do not wait for stragglers past the deadline
        executor.shutdown(wait=False, cancel_futures=True)
    failed = sum(1 for r in results if isinstance(r, Failed))
    if failed:
        LOG.warning("%s of %s sub-fetches failed", failed, len(results))
    return results
