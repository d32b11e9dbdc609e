import aiohttp
import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from repo_badge.domain.exceptions import UpstreamException
from repo_badge.domain.models import RepoMetadata
from repo_badge.infrastructure.acl import GitHubTranslator

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "Badge-Generator"
# GitHub caps list endpoints at 100 items per page
LIST_PAGE_SIZE = 100
REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=10, connect=5)

class GitHubRestClient:
    """
    Read-only client for the public GitHub REST API.
    All calls are anonymous and made exactly once: failures surface as UpstreamException, never retried.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        api_url: str = DEFAULT_API_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: aiohttp.ClientTimeout = REQUEST_TIMEOUT,
    ):
        self.session = session
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.api_url}{path}"
        try:
            async with self.session.get(url, params=params, headers=self.headers, timeout=self.timeout) as response:
                if not 200 <= response.status < 300:
                    logger.warning(f"GitHub API returned HTTP {response.status} for {path}.")
                    raise UpstreamException(f"GitHub API request to {path} failed", status=response.status)

                if response.status == 204:
                    return None

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    logger.warning(f"GitHub API returned a body that is not JSON for {path}.")
                    raise UpstreamException(f"GitHub API returned malformed JSON for {path}", status=response.status) from e

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Request to GitHub API {path} failed: {e!r}")
            raise UpstreamException(f"GitHub API request to {path} failed: {e!r}") from e

    async def _get_list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Any]:
        data = await self._get_json(path, params)
        # Empty repositories answer list endpoints with 204 No Content
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning(f"GitHub API returned {type(data).__name__} where a list was expected for {path}.")
            raise UpstreamException(f"GitHub API returned an unexpected payload for {path}")
        return data

    async def fetch_repo(self, owner: str, repo: str) -> RepoMetadata:
        """
        Fetches the repository resource. Doubles as an existence check for the repository.

        Raises:
            UpstreamException: On a non-2xx status, network failure or malformed payload.
        """
        path = self._repo_path(owner, repo)
        data = await self._get_json(path)
        try:
            return GitHubTranslator.to_metadata(data)
        except ValueError as e:
            logger.warning(f"Unusable repository payload for {owner}/{repo}: {e}")
            raise UpstreamException(str(e)) from e

    async def fetch_open_pull_requests(self, owner: str, repo: str) -> int:
        path = f"{self._repo_path(owner, repo)}/pulls"
        pulls = await self._get_list(path, {"state": "open", "per_page": LIST_PAGE_SIZE})
        return len(pulls)

    async def fetch_commits(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """Returns the first page of commits on the default branch, most recent first."""
        path = f"{self._repo_path(owner, repo)}/commits"
        return await self._get_list(path)

    async def fetch_contributors(self, owner: str, repo: str) -> int:
        path = f"{self._repo_path(owner, repo)}/contributors"
        contributors = await self._get_list(path, {"per_page": LIST_PAGE_SIZE})
        return len(contributors)
