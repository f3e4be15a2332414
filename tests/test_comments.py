"""Tests for the comment subsystem (payloads and round-trips)."""

import pytest
from conftest import FakeAdapter, make_pr

from bitbucket_mcp.errors import UpstreamError
from bitbucket_mcp.services.comments import (
    add_general_comment,
    add_inline_comment,
    general_comment_payload,
    inline_comment_payload,
    list_comments,
)
from bitbucket_mcp.services.pagination import paginate


def test_general_payload_is_minimal() -> None:
    assert general_comment_payload("hello") == {"content": {"raw": "hello"}}


def test_inline_payload_anchors_to_line() -> None:
    assert inline_comment_payload("fix", "src/a.py", 10) == {
        "content": {"raw": "fix"},
        "inline": {"path": "src/a.py", "to": 10},
    }


def test_general_comment_round_trip(fake_adapter: FakeAdapter) -> None:
    """Created comment appears once on read-back, typed general, no anchor."""
    fake_adapter.add_pr(make_pr(7))
    created = add_general_comment(fake_adapter, 7, "hello")

    page = list_comments(fake_adapter, 7, paginate(1, 50))
    matching = [c for c in page.values if c.id == created.id]
    assert len(matching) == 1
    comment = matching[0]
    assert comment.content == "hello"
    assert comment.author == created.author
    assert comment.type.value == "general"
    assert comment.inline is None
    assert "inline" not in comment.to_payload()


def test_inline_comment_round_trip(fake_adapter: FakeAdapter) -> None:
    """Read-back anchor matches the supplied path and line exactly."""
    fake_adapter.add_pr(make_pr(7))
    created = add_inline_comment(fake_adapter, 7, "rename", "src/app.py", 12)

    page = list_comments(fake_adapter, 7, paginate(1, 50))
    comment = next(c for c in page.values if c.id == created.id)
    assert comment.type.value == "inline"
    assert comment.inline.path == "src/app.py"
    assert comment.inline.to_line == 12
    assert comment.to_payload()["inline"] == {"path": "src/app.py", "from": None, "to": 12}


def test_add_comment_returns_remote_record(fake_adapter: FakeAdapter) -> None:
    """The returned comment is the adapter's record, not a local copy."""
    fake_adapter.author = "Remote Name"
    comment = add_general_comment(fake_adapter, 7, "hi")
    assert comment.author == "Remote Name"
    assert comment is fake_adapter.comments[7][0]


def test_add_comment_upstream_error_propagates(fake_adapter: FakeAdapter) -> None:
    fake_adapter.failures[("create_pr_comment", 7)] = UpstreamError(403, "Forbidden", "no permission")
    with pytest.raises(UpstreamError) as exc_info:
        add_general_comment(fake_adapter, 7, "hi")
    assert "no permission" in str(exc_info.value)
