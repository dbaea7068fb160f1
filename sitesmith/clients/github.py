"""Client for the GitHub REST API: repositories, Git Data and Pages.

Content is pushed through the Git Data API (tree -> commit -> ref) so a
whole site lands as one commit, without a local git checkout.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from typing_extensions import TypedDict

from sitesmith.errors import NotConfiguredError, UpstreamError

logger = structlog.get_logger()


class PagesInfo(TypedDict):
    status: str
    cname: str
    html_url: str
    https_enforced: bool
    protected_domain_state: str
    https_certificate_state: str


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if not isinstance(data, dict):
        return str(data)
    message = str(data.get("message", ""))
    details = [str(e.get("message", "")) for e in data.get("errors", []) if isinstance(e, dict)]
    return "; ".join(filter(None, [message, *details])) or resp.reason_phrase


class GitHubClient:
    """GitHub API client authenticated with a personal access token."""

    name = "github"

    def __init__(self, token: str = "", owner: str = "", timeout: float = 30.0) -> None:
        self.token = token
        self.owner = owner
        self.base_url = "https://api.github.com"
        self.timeout = timeout

    @property
    def is_available(self) -> bool:
        return bool(self.token and self.owner)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "sitesmith",
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if not self.is_available:
            raise NotConfiguredError("GitHub")
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(
                method, f"{self.base_url}{path}", headers=self._headers(), **kwargs
            )

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_error:
            raise UpstreamError(self.name, resp.status_code, _error_message(resp))

    def pages_url(self, repo: str) -> str:
        return f"https://{self.owner.lower()}.github.io/{repo}/"

    def repo_url(self, repo: str) -> str:
        return f"https://github.com/{self.owner}/{repo}"

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    async def repo_exists(self, repo: str) -> bool:
        resp = await self._request("GET", f"/repos/{self.owner}/{repo}")
        if resp.status_code == 404:
            return False
        self._raise_for_status(resp)
        return True

    async def create_repo(self, repo: str, description: str = "") -> dict[str, Any]:
        """Create a public repository with an initial commit on ``main``.

        Raises UpstreamError(422) when the name is already taken.
        """
        resp = await self._request(
            "POST",
            "/user/repos",
            json={
                "name": repo,
                "description": description,
                "private": False,
                "auto_init": True,
            },
        )
        self._raise_for_status(resp)
        logger.info("GitHub repo created", repo=repo)
        data: dict[str, Any] = resp.json()
        return data

    # ------------------------------------------------------------------
    # Git Data
    # ------------------------------------------------------------------

    async def get_branch_sha(self, repo: str, branch: str = "main") -> str:
        resp = await self._request("GET", f"/repos/{self.owner}/{repo}/git/ref/heads/{branch}")
        self._raise_for_status(resp)
        return str(resp.json()["object"]["sha"])

    async def _get_tree_sha(self, repo: str, commit_sha: str) -> str:
        resp = await self._request("GET", f"/repos/{self.owner}/{repo}/git/commits/{commit_sha}")
        self._raise_for_status(resp)
        return str(resp.json()["tree"]["sha"])

    async def commit_files(
        self,
        repo: str,
        files: dict[str, str],
        message: str,
        branch: str = "main",
        keep_existing: bool = False,
    ) -> str:
        """Write *files* to *branch* as a single commit and return its SHA.

        Without *keep_existing* the new tree holds exactly *files*; otherwise
        they are layered over the current tree.
        """
        parent_sha = await self.get_branch_sha(repo, branch)
        tree_payload: dict[str, Any] = {
            "tree": [
                {"path": path, "mode": "100644", "type": "blob", "content": content}
                for path, content in files.items()
            ]
        }
        if keep_existing:
            tree_payload["base_tree"] = await self._get_tree_sha(repo, parent_sha)

        resp = await self._request(
            "POST", f"/repos/{self.owner}/{repo}/git/trees", json=tree_payload
        )
        self._raise_for_status(resp)
        tree_sha = resp.json()["sha"]

        resp = await self._request(
            "POST",
            f"/repos/{self.owner}/{repo}/git/commits",
            json={"message": message, "tree": tree_sha, "parents": [parent_sha]},
        )
        self._raise_for_status(resp)
        commit_sha = str(resp.json()["sha"])

        resp = await self._request(
            "PATCH",
            f"/repos/{self.owner}/{repo}/git/refs/heads/{branch}",
            json={"sha": commit_sha, "force": False},
        )
        self._raise_for_status(resp)
        logger.info("GitHub commit pushed", repo=repo, sha=commit_sha[:7], files=len(files))
        return commit_sha

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def enable_pages(self, repo: str, branch: str = "main", cname: str = "") -> str:
        """Turn on Pages serving from the branch root and bind *cname*.

        Returns the Pages URL GitHub reports.
        """
        source = {"branch": branch, "path": "/"}
        resp = await self._request(
            "POST", f"/repos/{self.owner}/{repo}/pages", json={"source": source}
        )
        html_url = ""
        if resp.status_code == 409:
            logger.debug("Pages already enabled, updating", repo=repo)
        else:
            self._raise_for_status(resp)
            html_url = str(resp.json().get("html_url", ""))

        if cname or resp.status_code == 409:
            update: dict[str, Any] = {"source": source}
            if cname:
                update["cname"] = cname
            put = await self._request("PUT", f"/repos/{self.owner}/{repo}/pages", json=update)
            self._raise_for_status(put)

        if cname:
            return f"https://{cname}/"
        return html_url or self.pages_url(repo)

    async def get_pages(self, repo: str) -> PagesInfo | None:
        """Pages status, or None when Pages is not enabled yet."""
        resp = await self._request("GET", f"/repos/{self.owner}/{repo}/pages")
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp)
        data = resp.json()
        cert = data.get("https_certificate") or {}
        return {
            "status": str(data.get("status") or ""),
            "cname": str(data.get("cname") or ""),
            "html_url": str(data.get("html_url") or ""),
            "https_enforced": bool(data.get("https_enforced")),
            "protected_domain_state": str(data.get("protected_domain_state") or ""),
            "https_certificate_state": str(cert.get("state") or ""),
        }
