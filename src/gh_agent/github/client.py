"""GitHub REST/GraphQL client for pull request review."""

import base64
import binascii
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from gh_agent.config import AgentConfig
from gh_agent.github.exceptions import (
    GitHubApiError,
    GitHubError,
    GitHubInputError,
    GraphQLError,
)
from gh_agent.models.github_models import (
    CodeSearchResponse,
    CreateReview,
    CreateReviewResponse,
    FileContentPair,
    PrFile,
    PullRequest,
)
from gh_agent.utils.diff_parser import split_raw_diff

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"
FILES_PAGE_SIZE = 100

PR_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      number
      title
      body
      state
      additions
      deletions
      changedFiles
      headRefName
      baseRefName
      headRefOid
      files(first: 100) {
        pageInfo { hasNextPage endCursor }
        nodes { path additions deletions changeType }
      }
    }
  }
}
"""

PR_FILES_PAGE_QUERY = """
query($owner: String!, $repo: String!, $number: Int!, $cursor: String!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      files(first: 100, after: $cursor) {
        pageInfo { hasNextPage endCursor }
        nodes { path additions deletions changeType }
      }
    }
  }
}
"""

_CHANGE_TYPE_MAP = {
    "ADDED": "added",
    "DELETED": "removed",
    "REMOVED": "removed",
    "MODIFIED": "modified",
    "CHANGED": "modified",
    "RENAMED": "renamed",
    "COPIED": "copied",
}


def map_change_type(change_type: str) -> str:
    """Map a GraphQL PatchStatus to the REST file status vocabulary."""
    return _CHANGE_TYPE_MAP.get(change_type, change_type.lower())


def split_repo(repo: str) -> tuple[str, str]:
    """Split "owner/repo".

    Raises:
        GitHubInputError: If repo is not in owner/repo format.
    """
    owner, sep, name = repo.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise GitHubInputError(f"Repository must be in owner/repo format, got: {repo}")
    return owner, name


def _pr_file_from_node(node: dict[str, Any]) -> PrFile:
    return PrFile(
        filename=node["path"],
        status=map_change_type(node.get("changeType", "")),
        additions=node.get("additions", 0),
        deletions=node.get("deletions", 0),
    )


class GitHubClient:
    """Thin synchronous GitHub client.

    One httpx.Client is shared by all calls, including the worker threads
    used for concurrent content fetches.
    """

    def __init__(self, config: AgentConfig, http_client: httpx.Client | None = None) -> None:
        self.config = config
        self.http = http_client or httpx.Client(
            base_url=config.api_url,
            timeout=config.timeout_seconds,
        )
        self.http.headers.update({
            "Authorization": f"Bearer {config.github_token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": config.user_agent,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        })

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- transport ---

    def _request(
        self,
        method: str,
        path: str,
        *,
        label: str = "GitHub API error",
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise GitHubError(f"Request to {path} failed: {exc}") from exc
        if not response.is_success:
            raise GitHubApiError(
                f"{label} {response.status_code}: {response.text}",
                status_code=response.status_code,
                endpoint=path,
            )
        return response

    def graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run a GraphQL query and return its "data" object.

        Raises:
            GraphQLError: If the response has errors or no data.
        """
        response = self._request(
            "POST",
            "/graphql",
            label="GitHub GraphQL error",
            json={"query": query, "variables": variables},
        )
        payload = response.json()
        errors = payload.get("errors")
        if errors:
            messages = "; ".join(str(e.get("message", e)) for e in errors)
            raise GraphQLError(f"GraphQL errors: {messages}")
        data = payload.get("data")
        if not data:
            raise GraphQLError("No data in GraphQL response")
        return data

    # --- pull requests ---

    def get_pr(self, repo: str, number: int) -> PullRequest:
        """Fetch PR metadata and the full file list (no patches)."""
        owner, name = split_repo(repo)
        variables = {"owner": owner, "repo": name, "number": number}
        data = self.graphql(PR_QUERY, variables)
        pr = data["repository"]["pullRequest"]

        files = [_pr_file_from_node(node) for node in pr["files"]["nodes"]]
        page_info = pr["files"]["pageInfo"]
        while page_info.get("hasNextPage"):
            page = self.graphql(
                PR_FILES_PAGE_QUERY,
                {**variables, "cursor": page_info.get("endCursor") or ""},
            )
            connection = page["repository"]["pullRequest"]["files"]
            files.extend(_pr_file_from_node(node) for node in connection["nodes"])
            page_info = connection["pageInfo"]

        return PullRequest(
            number=pr["number"],
            title=pr["title"],
            body=pr.get("body"),
            state=pr["state"],
            additions=pr.get("additions", 0),
            deletions=pr.get("deletions", 0),
            changed_files=pr.get("changedFiles", 0),
            head_ref=pr["headRefName"],
            base_ref=pr["baseRefName"],
            head_sha=pr["headRefOid"],
            files=files,
        )

    def get_pr_raw_diff(self, repo: str, number: int) -> str:
        split_repo(repo)
        response = self._request(
            "GET",
            f"/repos/{repo}/pulls/{number}",
            headers={"Accept": "application/vnd.github.diff"},
        )
        return response.text

    def get_pr_with_patches(self, repo: str, number: int) -> PullRequest:
        """Fetch PR metadata and attach each file's patch from the raw diff."""
        pr = self.get_pr(repo, number)
        patches = split_raw_diff(self.get_pr_raw_diff(repo, number))
        for file in pr.files:
            file.patch = patches.get(file.filename)
        return pr

    # --- contents ---

    def get_file_content(self, repo: str, path: str, ref: str) -> str:
        """Return the text of `path` at `ref`.

        Raises:
            GitHubError: If the file is missing, binary or not valid UTF-8.
        """
        response = self._request(
            "GET",
            f"/repos/{repo}/contents/{quote(path)}",
            params={"ref": ref},
        )
        payload = response.json()
        if not isinstance(payload, dict):
            raise GitHubError(f"{path} is a directory, not a file")
        encoded = "".join((payload.get("content") or "").split())
        try:
            return base64.b64decode(encoded).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise GitHubError(f"{path} at {ref} is not UTF-8 text") from exc

    def _try_content(self, repo: str, path: str, ref: str) -> str | None:
        try:
            return self.get_file_content(repo, path, ref)
        except GitHubError as exc:
            logger.debug("skipping %s@%s: %s", path, ref, exc)
            return None

    def _pool_size(self, task_count: int) -> int:
        return max(1, self.config.max_workers or task_count)

    def get_file_pairs(
        self,
        repo: str,
        files: list[PrFile],
        base_ref: str,
        head_ref: str,
    ) -> list[FileContentPair]:
        """Fetch base/head contents of every file concurrently.

        Added files have no before side and removed files no after side.
        A failed fetch leaves that side empty; it is never retried.
        """
        def fetch(file: PrFile) -> FileContentPair:
            before = None if file.status == "added" else self._try_content(repo, file.filename, base_ref)
            after = None if file.status == "removed" else self._try_content(repo, file.filename, head_ref)
            return FileContentPair(
                filename=file.filename,
                status=file.status,
                before_content=before,
                after_content=after,
            )

        if not files:
            return []
        with ThreadPoolExecutor(max_workers=self._pool_size(len(files))) as pool:
            return list(pool.map(fetch, files))

    def fetch_file_contents(
        self,
        repo: str,
        paths: list[str],
        ref: str,
    ) -> list[tuple[str, str]]:
        """Fetch (path, content) for each path concurrently, omitting failures."""
        if not paths:
            return []
        with ThreadPoolExecutor(max_workers=self._pool_size(len(paths))) as pool:
            contents = list(pool.map(lambda p: self._try_content(repo, p, ref), paths))
        return [(path, content) for path, content in zip(paths, contents) if content is not None]

    # --- search & reviews ---

    def search_code(
        self,
        repo: str,
        query: str,
        path_prefix: str | None = None,
    ) -> CodeSearchResponse:
        """GitHub Code Search within one repository (default branch only)."""
        q = f"{query} repo:{repo}"
        if path_prefix:
            q += f" path:{path_prefix}"
        response = self._request(
            "GET",
            "/search/code",
            label="GitHub Code Search error",
            params={"q": q, "per_page": FILES_PAGE_SIZE},
            headers={"Accept": "application/vnd.github.text-match+json"},
        )
        try:
            return CodeSearchResponse.model_validate(response.json())
        except ValidationError as exc:
            raise GitHubError(f"Unexpected Code Search response: {exc}") from exc

    def create_review(self, repo: str, number: int, review: CreateReview) -> CreateReviewResponse:
        split_repo(repo)
        response = self._request(
            "POST",
            f"/repos/{repo}/pulls/{number}/reviews",
            json=review.model_dump(exclude_none=True),
        )
        return CreateReviewResponse.model_validate(response.json())
