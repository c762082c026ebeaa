from __future__ import annotations

from types import TracebackType

import httpx
from loguru import logger


class GitHubNotFoundError(Exception):
    """Raised when a username does not resolve to a GitHub profile."""

    def __init__(self, username: str) -> None:
        super().__init__(f'GitHub user "{username}" not found')
        self.username = username


class GitHubClient:
    def __init__(self, token: str = "", transport: httpx.BaseTransport | None = None) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        # Anonymous access works, just with GitHub's lower rate limit.
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.Client(
            base_url="https://api.github.com",
            headers=headers,
            timeout=30,
            transport=transport,
        )

    # -- context manager ---------------------------------------------------

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # -- public API ---------------------------------------------------------

    def get_user(self, username: str) -> dict:
        resp = self._client.get(f"/users/{username}")
        if resp.status_code == 404:
            raise GitHubNotFoundError(username)
        resp.raise_for_status()
        return resp.json()

    def list_repos(self, username: str, per_page: int = 30) -> list[dict]:
        """Return one page of repos owned by ``username``, most recently updated first."""
        resp = self._client.get(
            f"/users/{username}/repos",
            params={"sort": "updated", "per_page": per_page, "type": "owner"},
        )
        resp.raise_for_status()
        repos = resp.json()
        logger.debug("Listed {} repos for {}", len(repos), username)
        return repos

    def get_languages(self, owner: str, repo: str) -> dict[str, int]:
        resp = self._client.get(f"/repos/{owner}/{repo}/languages")
        resp.raise_for_status()
        return resp.json()

    def has_readme(self, owner: str, repo: str) -> bool:
        resp = self._client.get(f"/repos/{owner}/{repo}/readme")
        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        return True

    def get_readme_raw(self, owner: str, repo: str) -> str:
        """Fetch the README as raw text instead of the base64 JSON envelope."""
        resp = self._client.get(
            f"/repos/{owner}/{repo}/readme",
            headers={"Accept": "application/vnd.github.raw+json"},
        )
        resp.raise_for_status()
        return resp.text

    def get_default_branch(self, owner: str, repo: str) -> str:
        resp = self._client.get(f"/repos/{owner}/{repo}")
        resp.raise_for_status()
        return resp.json()["default_branch"]

    def get_tree(self, owner: str, repo: str, sha: str, recursive: bool = True) -> list[dict]:
        params = {"recursive": "1"} if recursive else None
        resp = self._client.get(f"/repos/{owner}/{repo}/git/trees/{sha}", params=params)
        resp.raise_for_status()
        return resp.json().get("tree", [])

    def get_file_tree(self, owner: str, repo: str) -> list[dict]:
        """Return the recursive tree of the repo's default branch."""
        branch = self.get_default_branch(owner, repo)
        return self.get_tree(owner, repo, branch)

    def list_commits(
        self,
        owner: str,
        repo: str,
        since: str | None = None,
        per_page: int = 1,
    ) -> list[dict]:
        params: dict = {"per_page": per_page}
        if since:
            params["since"] = since
        resp = self._client.get(f"/repos/{owner}/{repo}/commits", params=params)
        resp.raise_for_status()
        return resp.json()

    def close(self) -> None:
        self._client.close()
