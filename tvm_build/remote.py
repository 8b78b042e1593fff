"""
GitHub API client for listing the revisions a repository offers.
"""

import logging
import re
from typing import Callable, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import __version__
from .config import Settings

logger = logging.getLogger("tvm_build")

_GITHUB_URL = re.compile(
    r"^(?:https?://github\.com/|git@github\.com:)(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)


def parse_github_url(url: str) -> Tuple[str, str]:
    """Split a GitHub clone URL into (owner, repo)."""
    match = _GITHUB_URL.match(url.strip())
    if not match:
        raise ValueError(f"not a GitHub repository URL: {url}")
    return match.group("owner"), match.group("repo")


class GitHubClient:
    """Client for listing branches and tags through the GitHub API."""

    page_size = 100

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the GitHub API client."""
        self.settings = settings or Settings()
        self.base_url = self.settings.github_api_url.rstrip("/")

        # Set up session with retries
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)

        self.session = requests.Session()
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "User-Agent": f"tvm-build/{__version__}",
        })
        if self.settings.github_token:
            self.session.headers["Authorization"] = f"Bearer {self.settings.github_token}"

    def _get_names(
        self,
        path: str,
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> List[str]:
        api_url = f"{self.base_url}/{path}"
        logger.debug(f"Fetching {api_url}")

        names: List[str] = []
        page = 1
        while True:
            response = self.session.get(
                api_url,
                params={"per_page": self.page_size, "page": page},
                timeout=(5, 15),
            )
            response.raise_for_status()
            items = response.json()
            names.extend(item["name"] for item in items)

            if progress_callback:
                progress_callback(len(names))

            if len(items) < self.page_size:
                break
            page += 1

        logger.debug(f"Retrieved {len(names)} names across {page} pages")
        return names

    def list_branches(self, repository_url: str, **kwargs) -> List[str]:
        owner, repo = parse_github_url(repository_url)
        return self._get_names(f"repos/{owner}/{repo}/branches", **kwargs)

    def list_tags(self, repository_url: str, **kwargs) -> List[str]:
        owner, repo = parse_github_url(repository_url)
        return self._get_names(f"repos/{owner}/{repo}/tags", **kwargs)
