"""Tests for caller-facing operations (validation, assembly, call counts)."""

import pytest
from conftest import FakeAdapter, make_pipeline, make_pr

from bitbucket_mcp.config import BitbucketConfig
from bitbucket_mcp.errors import InvalidArgument, UpstreamError
from bitbucket_mcp.models import Commit
from bitbucket_mcp.operations import PR_ID_NOTE, BitbucketOperations


@pytest.fixture
def ops(fake_adapter: FakeAdapter, bitbucket_config: BitbucketConfig) -> BitbucketOperations:
    return BitbucketOperations(fake_adapter, bitbucket_config)


class TestListPullRequests:
    def test_defaults(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        fake_adapter.add_pr(make_pr(1))
        result = ops.list_pull_requests()
        assert fake_adapter.calls == [("list_pull_requests", "OPEN", 1, 50, None)]
        assert result["page"] == 1
        assert result["page_length"] == 50
        assert result["pull_requests"][0]["id"] == 1
        assert result["pull_requests"][0]["description"] == "Description"
        assert result["pull_requests"][0]["links"]["html"].endswith("/pull-requests/1")

    def test_merged_page_two(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        ops.list_pull_requests(state="MERGED", limit=10, page=2)
        assert fake_adapter.calls == [("list_pull_requests", "MERGED", 2, 10, None)]

    @pytest.mark.parametrize("limit", [0, 101])
    def test_bad_limit_makes_no_calls(
        self, ops: BitbucketOperations, fake_adapter: FakeAdapter, limit: int
    ) -> None:
        with pytest.raises(InvalidArgument):
            ops.list_pull_requests(state="MERGED", limit=limit, page=2)
        assert fake_adapter.calls == []

    def test_bad_state(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        with pytest.raises(InvalidArgument):
            ops.list_pull_requests(state="CLOSED")
        assert fake_adapter.calls == []


class TestGetPrDetails:
    def test_neither_selector_makes_no_calls(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        with pytest.raises(InvalidArgument):
            ops.get_pr_details()
        assert fake_adapter.calls == []

    def test_by_id_never_searches_branch(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        fake_adapter.add_pr(make_pr(4))
        result = ops.get_pr_details(pr_id=4)
        assert result["search_method"] == "pr_id: 4"
        assert result["pull_request"]["id"] == 4
        assert all(call[0] != "find_pull_requests_by_source_branch" for call in fake_adapter.calls)

    def test_by_branch(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        fake_adapter.add_pr(make_pr(4, source_branch="feature/x"))
        fake_adapter.commits[4] = [Commit(hash="aaa", message="m")]
        fake_adapter.commit_diffs["aaa"] = "d"
        result = ops.get_pr_details(source_branch="feature/x", include_diff=True)
        assert result["search_method"] == "source_branch: feature/x"
        assert result["pull_request"]["commits"][0]["diff"] == "d"

    def test_branch_not_found_is_not_an_error(self, ops: BitbucketOperations) -> None:
        result = ops.get_pr_details(source_branch="ghost")
        assert result["pull_request"] is None
        assert result["message"] == "No pull request found for source branch: ghost"

    def test_primary_fetch_error_propagates(self, ops: BitbucketOperations) -> None:
        with pytest.raises(UpstreamError):
            ops.get_pr_details(pr_id=99)

    def test_partial_failure_still_succeeds(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        fake_adapter.add_pr(make_pr(4))
        fake_adapter.commits[4] = [Commit(hash="aaa"), Commit(hash="bbb")]
        fake_adapter.commit_diffs["bbb"] = "good diff"
        fake_adapter.failures[("get_commit_diff", "aaa")] = UpstreamError(500, "Internal Server Error")
        result = ops.get_pr_details(pr_id=4, include_diff=True)
        commits = result["pull_request"]["commits"]
        assert commits[0]["diff"].startswith("Error fetching diff:")
        assert commits[1]["diff"] == "good diff"


def test_get_pr_diff(ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
    fake_adapter.add_pr(make_pr(4))
    fake_adapter.pr_diffs[4] = "all changes"
    result = ops.get_pr_diff(pr_id=4)
    assert result["pull_request"]["diff"] == "all changes"


class TestComments:
    def test_add_and_view_round_trip(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        fake_adapter.add_pr(make_pr(7))
        added = ops.add_pr_comment(7, "hello")["comment"]

        viewed = ops.view_pr_comments(pr_id=7)["comments"]
        matching = [c for c in viewed if c["id"] == added["id"]]
        assert len(matching) == 1
        assert matching[0]["content"] == "hello"
        assert matching[0]["author"] == added["author"]
        assert matching[0]["type"] == "general"
        assert "inline" not in matching[0]

    def test_inline_round_trip(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        fake_adapter.add_pr(make_pr(7))
        response = ops.add_pr_inline_comment(7, "nit", "src/app.py", 3)
        assert response["message"] == "Inline comment added successfully to pull request"

        viewed = ops.view_pr_comments(pr_id=7)["comments"]
        assert viewed[0]["inline"]["path"] == "src/app.py"
        assert viewed[0]["inline"]["to"] == 3

    def test_view_by_id_skips_pr_fetch(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        ops.view_pr_comments(pr_id=7, limit=5, page=2)
        assert fake_adapter.calls == [("list_pr_comments", 7, 2, 5)]

    def test_view_by_branch(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        fake_adapter.add_pr(make_pr(8, source_branch="dev"))
        result = ops.view_pr_comments(source_branch="dev")
        assert result["pull_request_id"] == 8
        assert result["search_method"] == "source_branch: dev"

    def test_view_without_selector(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        with pytest.raises(InvalidArgument):
            ops.view_pr_comments(limit=10)
        assert fake_adapter.calls == []

    def test_view_bad_limit(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        with pytest.raises(InvalidArgument):
            ops.view_pr_comments(pr_id=7, limit=0)
        assert fake_adapter.calls == []


class TestListPipelines:
    def test_correlates_and_notes_advisory(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        fake_adapter.commit_messages = {"bbb": "Merged #12"}
        fake_adapter.pipelines = [make_pipeline(2, "aaa", "Fix login bug #42"), make_pipeline(1, "bbb")]

        result = ops.list_pipelines(state="SUCCESSFUL", target_branch="main")

        assert fake_adapter.calls[0] == ("list_pipelines", 1, 10, "SUCCESSFUL", "main")
        assert [p["pr_id"] for p in result["pipelines"]] == [42, 12]
        assert result["pr_id_note"] == PR_ID_NOTE
        assert result["next"].endswith("page=2")
        assert "uuid" not in result["pipelines"][0]

    def test_bad_state(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        with pytest.raises(InvalidArgument):
            ops.list_pipelines(state="DONE")
        assert fake_adapter.calls == []

    def test_bad_limit(self, ops: BitbucketOperations, fake_adapter: FakeAdapter) -> None:
        with pytest.raises(InvalidArgument):
            ops.list_pipelines(limit=101)
        assert fake_adapter.calls == []
