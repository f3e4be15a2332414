"""Bitbucket Cloud REST 2.0 adapter."""

import base64
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, TypeVar

import requests
from pydantic import ValidationError

from bitbucket_mcp.adapters.base import RepositoryAdapter
from bitbucket_mcp.config import BitbucketConfig
from bitbucket_mcp.errors import MalformedResponseError, UpstreamError
from bitbucket_mcp.models import (
    Comment,
    Commit,
    InlineAnchor,
    Page,
    PipelineTarget,
    PullRequest,
    RawPipeline,
    RemotePageParams,
    Reviewer,
)
from bitbucket_mcp.services.pagination import to_page_envelope

T = TypeVar("T")

LOG = logging.getLogger("bitbucket_mcp.adapters.bitbucket")


def _parse_iso(s: str | None) -> datetime | None:
    if not s:
        return None
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _bbql_string(value: str) -> str:
    """Quote a value for Bitbucket's query language (q=...)."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _html_href(data: Dict[str, Any]) -> str | None:
    return ((data.get("links") or {}).get("html") or {}).get("href")


def _reviewers_from_api(data: Dict[str, Any]) -> List[Reviewer]:
    """Reviewers in upstream order; approval falls back to participants."""
    approvals: Dict[str, bool] = {}
    for participant in data.get("participants") or []:
        user = participant.get("user") or {}
        for key in (user.get("account_id"), user.get("uuid")):
            if key:
                approvals[key] = bool(participant.get("approved"))

    reviewers = []
    for reviewer in data.get("reviewers") or []:
        approved = reviewer.get("approved")
        if approved is None:
            approved = approvals.get(reviewer.get("account_id")) or approvals.get(reviewer.get("uuid")) or False
        reviewers.append(Reviewer(display_name=reviewer.get("display_name") or "", approved=bool(approved)))
    return reviewers


@contextmanager
def _parsing(what: str) -> Iterator[None]:
    """Turn a missing or mistyped field into MalformedResponseError."""
    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as e:
        raise MalformedResponseError(what, f"{type(e).__name__}: {e}") from e


def _json(resp: requests.Response, what: str) -> Any:
    """Decode a 2xx body; a non-JSON body is a malformed response."""
    with _parsing(what):
        return resp.json()


def _pr_from_api(data: Dict[str, Any]) -> PullRequest:
    with _parsing("pull request"):
        author = data.get("author") or {}
        return PullRequest(
            id=data["id"],
            title=data.get("title") or "",
            description=data.get("description") or "",
            state=data.get("state") or "",
            author=author.get("display_name", ""),
            created_on=_parse_iso(data["created_on"]),
            updated_on=_parse_iso(data.get("updated_on") or data["created_on"]),
            source_branch=data["source"]["branch"]["name"],
            destination_branch=data["destination"]["branch"]["name"],
            html_url=_html_href(data),
            reviewers=_reviewers_from_api(data),
        )


def _commit_from_api(data: Dict[str, Any]) -> Commit:
    with _parsing("commit"):
        author = data.get("author") or {}
        user = author.get("user") or {}
        return Commit(
            hash=data["hash"],
            message=data.get("message") or "",
            author=user.get("display_name") or author.get("raw") or "",
            date=_parse_iso(data.get("date")),
        )


def _comment_from_api(data: Dict[str, Any]) -> Comment:
    with _parsing("comment"):
        user = data.get("user") or {}
        content = data.get("content") or {}
        inline_raw = data.get("inline")
        inline = None
        if inline_raw and inline_raw.get("path"):
            inline = InlineAnchor(
                path=inline_raw["path"],
                from_line=inline_raw.get("from"),
                to_line=inline_raw.get("to"),
            )
        parent = data.get("parent") or {}
        return Comment(
            id=data["id"],
            content=content.get("raw") or "",
            author=user.get("display_name", ""),
            created_on=_parse_iso(data["created_on"]),
            updated_on=_parse_iso(data.get("updated_on")),
            inline=inline,
            html_url=_html_href(data),
            parent_id=parent.get("id"),
            deleted=bool(data.get("deleted")),
        )


def _pipeline_state(state: Dict[str, Any] | None) -> str:
    """Flatten {"name": "COMPLETED", "result": {"name": "FAILED"}} to FAILED."""
    state = state or {}
    result = (state.get("result") or {}).get("name")
    return result or state.get("name") or "UNKNOWN"


def _pipeline_from_api(data: Dict[str, Any]) -> RawPipeline:
    with _parsing("pipeline"):
        target = data.get("target") or {}
        commit = target.get("commit") or {}
        ref_name = target.get("ref_name")
        if ref_name is None and isinstance(target.get("source"), str):
            # Pull request targets carry source/destination instead of a ref
            ref_name = target["source"]
        return RawPipeline(
            uuid=data.get("uuid"),
            build_number=data.get("build_number"),
            state=_pipeline_state(data.get("state")),
            created_on=_parse_iso(data.get("created_on")),
            completed_on=_parse_iso(data.get("completed_on")),
            run_number=data.get("run_number"),
            duration_in_seconds=data.get("duration_in_seconds"),
            target=PipelineTarget(
                ref_type=target.get("ref_type"),
                ref_name=ref_name,
                commit_hash=commit.get("hash"),
                commit_message=commit.get("message"),
            ),
            trigger=data.get("trigger"),
            links=data.get("links"),
        )


class BitbucketAdapter(RepositoryAdapter):
    """Bitbucket Cloud implementation bound to one repository."""

    def __init__(self, config: BitbucketConfig) -> None:
        self._api_url = config.api_url.rstrip("/")
        self._repo_base = f"{self._api_url}/repositories/{config.repository_path}"
        self._timeout = config.request_timeout
        self._max_commit_pages = config.max_commit_pages
        credentials = f"{config.username}:{config.password}".encode()
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"Basic {base64.b64encode(credentials).decode()}"
        self._session.headers["Accept"] = "application/json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> requests.Response:
        """Send a request; path is relative to the repository or an absolute
        continuation URL."""
        url = path if path.startswith("http") else f"{self._repo_base}{path}"
        headers = {"Accept": accept} if accept else None
        LOG.debug("%s %s params=%s", method, url, params)
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError(None, f"request failed: {e}") from e
        if not 200 <= resp.status_code < 300:
            raise UpstreamError(resp.status_code, resp.reason or "", resp.text or None)
        return resp

    def _get_page(
        self,
        path: str,
        params: RemotePageParams,
        parse: Callable[[Dict[str, Any]], T],
        extra: Dict[str, Any] | None = None,
    ) -> Page[T]:
        query = {**(extra or {}), **params.as_params()}
        data = _json(self._request("GET", path, params=query), "page") or {}
        with _parsing("page"):
            raw_values = data.get("values") or []
        values = [parse(d) for d in raw_values]
        return to_page_envelope(data, values, params)

    def _iter_values(self, path: str, max_pages: int) -> Iterator[Dict[str, Any]]:
        """Yield values across pages by following "next" links verbatim."""
        url: str | None = path
        pages = 0
        while url and pages < max_pages:
            data = _json(self._request("GET", url), "page") or {}
            with _parsing("page"):
                values = data.get("values") or []
                url = data.get("next")
            yield from values
            pages += 1
        if url:
            LOG.warning("Stopped following %s after %s pages", path, max_pages)

    def get_pull_request(self, pr_id: int) -> PullRequest:
        resp = self._request("GET", f"/pullrequests/{pr_id}")
        return _pr_from_api(_json(resp, "pull request"))

    def find_pull_requests_by_source_branch(self, source_branch: str) -> List[PullRequest]:
        resp = self._request(
            "GET",
            "/pullrequests",
            params={"q": f"source.branch.name={_bbql_string(source_branch)}"},
        )
        data = _json(resp, "pull request list") or {}
        with _parsing("pull request list"):
            raw_values = data.get("values") or []
        return [_pr_from_api(d) for d in raw_values]

    def list_pull_requests(
        self,
        state: str,
        params: RemotePageParams,
        target_branch: str | None = None,
    ) -> Page[PullRequest]:
        extra: Dict[str, Any] = {"state": state}
        if target_branch:
            extra["q"] = f"destination.branch.name={_bbql_string(target_branch)}"
        return self._get_page("/pullrequests", params, _pr_from_api, extra)

    def list_pr_commits(self, pr_id: int) -> List[Commit]:
        values = self._iter_values(f"/pullrequests/{pr_id}/commits", self._max_commit_pages)
        return [_commit_from_api(d) for d in values]

    def get_commit(self, commit_hash: str) -> Commit:
        resp = self._request("GET", f"/commit/{commit_hash}")
        return _commit_from_api(_json(resp, "commit"))

    def get_commit_diff(self, commit_hash: str) -> str:
        return self._request("GET", f"/diff/{commit_hash}", accept="text/plain").text

    def get_pr_diff(self, pr_id: int) -> str:
        return self._request("GET", f"/pullrequests/{pr_id}/diff", accept="text/plain").text

    def list_pr_comments(self, pr_id: int, params: RemotePageParams) -> Page[Comment]:
        return self._get_page(f"/pullrequests/{pr_id}/comments", params, _comment_from_api)

    def create_pr_comment(self, pr_id: int, payload: Dict[str, Any]) -> Comment:
        resp = self._request("POST", f"/pullrequests/{pr_id}/comments", json=payload)
        return _comment_from_api(_json(resp, "comment"))

    def list_pipelines(
        self,
        params: RemotePageParams,
        state: str | None = None,
        target_branch: str | None = None,
    ) -> Page[RawPipeline]:
        extra: Dict[str, Any] = {"sort": "-created_on"}
        if state:
            extra["state"] = state
        if target_branch:
            extra["target.ref_name"] = target_branch
        return self._get_page("/pipelines/", params, _pipeline_from_api, extra)
