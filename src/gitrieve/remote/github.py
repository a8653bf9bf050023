"""GitHub implementation of the remote client (REST + GraphQL over httpx)."""

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Any, TypeVar

import httpx
import structlog

from gitrieve.core.exceptions import RemoteAPIError
from gitrieve.core.models.items import (
    Discussion,
    DiscussionComment,
    DiscussionReply,
    Issue,
    IssueComment,
)
from gitrieve.core.models.release import Release, ReleaseAsset
from gitrieve.core.models.repository import RepositoryType
from gitrieve.git.identity import normalize_remote_url
from gitrieve.remote.base import RemoteClient
from gitrieve.remote.pagination import iter_pages

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DISCUSSIONS_QUERY = """
query($owner: String!, $name: String!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    discussions(first: $first, after: $after, orderBy: {field: UPDATED_AT, direction: DESC}) {
      nodes {
        number title body createdAt updatedAt
        author { login }
        category { name }
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""

COMMENTS_QUERY = """
query($owner: String!, $name: String!, $number: Int!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    discussion(number: $number) {
      comments(first: $first, after: $after) {
        nodes {
          id databaseId body createdAt lastEditedAt isAnswer
          author { login }
        }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""

REPLIES_QUERY = """
query($id: ID!, $first: Int!, $after: String) {
  node(id: $id) {
    ... on DiscussionComment {
      replies(first: $first, after: $after) {
        nodes {
          databaseId body createdAt lastEditedAt isAnswer
          author { login }
        }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""


def _login(node: dict[str, Any]) -> str:
    # Deleted accounts come back as a null author
    return ((node.get("author") or node.get("user")) or {}).get("login", "")


def _next_cursor(connection: dict[str, Any]) -> str | None:
    page_info = connection.get("pageInfo") or {}
    return page_info.get("endCursor") if page_info.get("hasNextPage") else None


def _parse(build: Callable[[Any], T], raw: Any, kind: str) -> T:
    """Map one API payload, turning shape errors into ``RemoteAPIError``.

    pydantic's ``ValidationError`` is a ``ValueError``.
    """
    try:
        return build(raw)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise RemoteAPIError(
            f"Unexpected {kind} payload from GitHub: {e}", details={"kind": kind}
        ) from e


def _issue(raw: dict[str, Any]) -> Issue:
    return Issue(
        number=raw["number"],
        title=raw.get("title") or "",
        body=raw.get("body") or "",
        state=raw.get("state") or "",
        author=_login(raw),
        created_at=raw["created_at"],
        updated_at=raw["updated_at"],
    )


def _issue_comment(raw: dict[str, Any]) -> IssueComment:
    return IssueComment(
        id=raw["id"],
        author=_login(raw),
        body=raw.get("body") or "",
        created_at=raw["created_at"],
        updated_at=raw["updated_at"],
    )


def _discussion(node: dict[str, Any]) -> Discussion:
    return Discussion(
        number=node["number"],
        title=node.get("title") or "",
        body=node.get("body") or "",
        category=(node.get("category") or {}).get("name", ""),
        author=_login(node),
        created_at=node["createdAt"],
        updated_at=node["updatedAt"],
    )


def _discussion_comment(node: dict[str, Any]) -> DiscussionComment:
    return DiscussionComment(
        id=node["databaseId"],
        node_id=node["id"],
        author=_login(node),
        body=node.get("body") or "",
        created_at=node["createdAt"],
        last_edited_at=node.get("lastEditedAt"),
        is_answer=bool(node.get("isAnswer")),
    )


def _discussion_reply(node: dict[str, Any]) -> DiscussionReply:
    return DiscussionReply(
        id=node["databaseId"],
        author=_login(node),
        body=node.get("body") or "",
        created_at=node["createdAt"],
        last_edited_at=node.get("lastEditedAt"),
        is_answer=bool(node.get("isAnswer")),
    )


def _release(raw: dict[str, Any]) -> Release:
    return Release(
        id=raw["id"],
        tag_name=raw["tag_name"],
        published_at=raw.get("published_at"),
        assets=[
            ReleaseAsset(
                id=asset["id"],
                name=asset["name"],
                size=asset["size"],
                state=asset.get("state", ""),
                download_url=asset.get("browser_download_url"),
            )
            for asset in raw.get("assets") or []
        ],
    )


def _connection(data: dict[str, Any], *path: str) -> dict[str, Any]:
    """Walk ``data`` down ``path``; missing levels read as empty."""
    node: Any = data
    for key in path:
        node = node.get(key) if isinstance(node, dict) else None
    return node or {}


class GitHubClient(RemoteClient):
    """Talks to the GitHub REST and GraphQL APIs."""

    def __init__(
        self,
        token: str = "",
        api_url: str = "https://api.github.com",
        graphql_url: str = "https://api.github.com/graphql",
        timeout: float = 60.0,
        page_size: int = 100,
        graphql_page_size: int = 50,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._graphql_url = graphql_url
        self._page_size = page_size
        self._graphql_page_size = graphql_page_size
        self._client = httpx.Client(
            base_url=api_url,
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- transport -------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteAPIError(
                f"GitHub API returned {e.response.status_code} for {e.request.url}",
                details={"status": e.response.status_code, "url": str(e.request.url)},
            ) from e
        except httpx.HTTPError as e:
            raise RemoteAPIError(f"GitHub API request failed: {e}", details={"url": url}) from e
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        """Decode a JSON body; proxies and captive portals answer 200 with HTML."""
        try:
            return response.json()
        except ValueError as e:
            raise RemoteAPIError(
                f"GitHub API returned a non-JSON body for {response.url}",
                details={
                    "url": str(response.url),
                    "content_type": response.headers.get("content-type", ""),
                },
            ) from e

    def _paginate(self, url: str, params: dict[str, Any] | None = None) -> Iterator[dict]:
        """Follow ``Link: rel="next"`` headers, one page at a time."""

        def fetch_page(cursor: str | None) -> tuple[list[dict], str | None]:
            if cursor is None:
                response = self._request(
                    "GET", url, params={"per_page": self._page_size, **(params or {})}
                )
            else:
                response = self._request("GET", cursor)
            items = self._json(response)
            if not isinstance(items, list):
                raise RemoteAPIError(
                    f"Expected a JSON list from {response.url}", details={"url": str(response.url)}
                )
            next_url = response.links.get("next", {}).get("url")
            logger.debug("Fetched page", url=str(response.url), next=bool(next_url))
            return items, next_url

        return iter_pages(fetch_page)

    def _graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        response = self._request(
            "POST", self._graphql_url, json={"query": query, "variables": variables}
        )
        payload = self._json(response)
        if not isinstance(payload, dict):
            raise RemoteAPIError("Unexpected GitHub GraphQL response", details={"variables": variables})
        if payload.get("errors"):
            messages = "; ".join(str(error.get("message", "")) for error in payload["errors"])
            raise RemoteAPIError(f"GitHub GraphQL error: {messages}", details={"variables": variables})
        return payload.get("data") or {}

    # --- repositories ----------------------------------------------------

    def list_owner_repositories(self, owner: str, kind: RepositoryType) -> list[str]:
        if kind == RepositoryType.ORG:
            url, params = f"/orgs/{owner}/repos", {"type": "all"}
        else:
            url, params = f"/users/{owner}/repos", {"type": "owner"}
        return [
            _parse(lambda raw: normalize_remote_url(raw["html_url"]), repo, "repository")
            for repo in self._paginate(url, params)
        ]

    def has_wiki(self, owner: str, name: str) -> bool:
        repo = self._json(self._request("GET", f"/repos/{owner}/{name}"))
        return _parse(lambda raw: bool(raw.get("has_wiki")), repo, "repository")

    # --- issues ----------------------------------------------------------

    def iter_issues(self, owner: str, name: str, since: datetime) -> Iterator[Issue]:
        params = {
            "state": "all",
            "since": since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "sort": "updated",
            "direction": "asc",
        }
        for raw in self._paginate(f"/repos/{owner}/{name}/issues", params):
            yield _parse(_issue, raw, "issue")

    def iter_issue_comments(self, owner: str, name: str, number: int) -> Iterator[IssueComment]:
        for raw in self._paginate(f"/repos/{owner}/{name}/issues/{number}/comments"):
            yield _parse(_issue_comment, raw, "issue comment")

    # --- discussions -----------------------------------------------------

    def iter_discussions(self, owner: str, name: str) -> Iterator[Discussion]:
        def fetch_page(cursor: str | None) -> tuple[list[Discussion], str | None]:
            data = self._graphql(
                DISCUSSIONS_QUERY,
                {"owner": owner, "name": name, "first": self._graphql_page_size, "after": cursor},
            )
            connection = _connection(data, "repository", "discussions")
            items = [_parse(_discussion, node, "discussion") for node in connection.get("nodes") or []]
            return items, _next_cursor(connection)

        return iter_pages(fetch_page)

    def iter_discussion_comments(
        self, owner: str, name: str, number: int
    ) -> Iterator[DiscussionComment]:
        def fetch_page(cursor: str | None) -> tuple[list[DiscussionComment], str | None]:
            data = self._graphql(
                COMMENTS_QUERY,
                {
                    "owner": owner,
                    "name": name,
                    "number": number,
                    "first": self._graphql_page_size,
                    "after": cursor,
                },
            )
            connection = _connection(data, "repository", "discussion", "comments")
            items = [
                _parse(_discussion_comment, node, "discussion comment")
                for node in connection.get("nodes") or []
            ]
            return items, _next_cursor(connection)

        return iter_pages(fetch_page)

    def iter_comment_replies(self, comment: DiscussionComment) -> Iterator[DiscussionReply]:
        def fetch_page(cursor: str | None) -> tuple[list[DiscussionReply], str | None]:
            data = self._graphql(
                REPLIES_QUERY,
                {"id": comment.node_id, "first": self._graphql_page_size, "after": cursor},
            )
            connection = _connection(data, "node", "replies")
            items = [
                _parse(_discussion_reply, node, "discussion reply")
                for node in connection.get("nodes") or []
            ]
            return items, _next_cursor(connection)

        return iter_pages(fetch_page)

    # --- releases --------------------------------------------------------

    def list_releases(self, owner: str, name: str) -> list[Release]:
        return [
            _parse(_release, raw, "release")
            for raw in self._paginate(f"/repos/{owner}/{name}/releases")
        ]

    def download_asset(self, owner: str, name: str, asset: ReleaseAsset) -> bytes:
        logger.info("Downloading asset", repository=f"{owner}/{name}", asset=asset.name, size=asset.size)
        response = self._request(
            "GET",
            f"/repos/{owner}/{name}/releases/assets/{asset.id}",
            headers={"Accept": "application/octet-stream"},
        )
        return response.content
