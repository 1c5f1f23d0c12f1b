import aiohttp
import asyncio
import logging
import re
from typing import Any, Dict, Mapping, Optional, Tuple

from reposcope.domain.exceptions import (
    AccessForbiddenException,
    RateLimitExceededException,
    RepositoryNotFoundException,
    UpstreamFailureException,
    UpstreamTimeoutException,
)

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
REQUEST_TIMEOUT_SECONDS = 10
REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_SECONDS)

# Matches the page number of the rel="last" link in a paginated response.
_LAST_PAGE_RE = re.compile(r'[?&]page=(\d+)[^>]*>;\s*rel="last"')


def last_page_from_link(link_header: Optional[str]) -> Optional[int]:
    if not link_header:
        return None
    match = _LAST_PAGE_RE.search(link_header)
    return int(match.group(1)) if match else None


class GitHubRestClient:
    """
    Client for the GitHub REST API.
    Each method performs one request on a caller-owned session and maps HTTP
    failures onto the domain exception hierarchy.
    """

    def __init__(self, token: Optional[str] = None):
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "reposcope",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self.api_url = API_URL
        logger.debug(f"GitHub token configured: {bool(token)}")

    async def _get(
        self,
        session: aiohttp.ClientSession,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Any, Mapping[str, str]]:
        """
        Performs a GET and returns (json_body, response_headers).

        Raises:
            RepositoryNotFoundException: on 404.
            RateLimitExceededException: on 403 with an exhausted rate limit.
            AccessForbiddenException: on any other 403.
            UpstreamTimeoutException: when REQUEST_TIMEOUT elapses.
            UpstreamFailureException: on any other HTTP or transport error, or an unparseable body.
        """
        url = f"{self.api_url}{path}"
        try:
            async with session.get(url, params=params, headers=self.headers, timeout=REQUEST_TIMEOUT) as response:
                if response.status == 404:
                    raise RepositoryNotFoundException(path)

                if response.status == 403:
                    if response.headers.get("X-RateLimit-Remaining") == "0":
                        raise RateLimitExceededException(path, reset_at=response.headers.get("X-RateLimit-Reset"))
                    raise AccessForbiddenException(path)

                if response.status >= 400:
                    raise UpstreamFailureException(path, status=response.status)

                data = await response.json()
                return data, response.headers

        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutException(path, REQUEST_TIMEOUT_SECONDS) from e
        except aiohttp.ClientError as e:
            raise UpstreamFailureException(path, message=f"GitHub request failed: {e}.") from e
        except ValueError as e:
            raise UpstreamFailureException(path, message=f"Invalid JSON from GitHub: {e}.") from e

    async def get_repository(self, session: aiohttp.ClientSession, owner: str, repo: str) -> Dict[str, Any]:
        """Fetches the repository resource. Failures are reported against `owner/repo`."""
        full_name = f"{owner}/{repo}"
        try:
            data, _ = await self._get(session, f"/repos/{owner}/{repo}")
        except RepositoryNotFoundException:
            raise RepositoryNotFoundException(full_name) from None
        except AccessForbiddenException:
            raise AccessForbiddenException(full_name) from None
        return data

    async def get_readme(self, session: aiohttp.ClientSession, owner: str, repo: str) -> Optional[Dict[str, Any]]:
        """Fetches the README resource, or None when the repository has no README."""
        try:
            data, _ = await self._get(session, f"/repos/{owner}/{repo}/readme")
        except RepositoryNotFoundException:
            return None
        return data

    async def get_languages(self, session: aiohttp.ClientSession, owner: str, repo: str) -> Dict[str, int]:
        data, _ = await self._get(session, f"/repos/{owner}/{repo}/languages")
        return data or {}

    async def get_contents(self, session: aiohttp.ClientSession, owner: str, repo: str, path: str = "") -> Any:
        """Returns a directory listing (list) or a file resource (dict)."""
        data, _ = await self._get(session, f"/repos/{owner}/{repo}/contents/{path}")
        return data

    async def count_items(self, session: aiohttp.ClientSession, owner: str, repo: str, resource: str) -> int:
        """
        Counts the items of a paginated collection (commits, contributors, releases)
        by requesting one item per page and reading the last page number.
        """
        data, headers = await self._get(session, f"/repos/{owner}/{repo}/{resource}", params={"per_page": 1})
        last_page = last_page_from_link(headers.get("Link"))
        if last_page is not None:
            return last_page
        return len(data) if isinstance(data, list) else 0
