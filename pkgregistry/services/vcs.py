"""
GitHub ownership checks.
Callers confirm a user may act on a repository before mutating its package.
"""

import logging
import re
from typing import Any, Dict, Optional

import requests

from pkgregistry.core.config import settings
from pkgregistry.core.results import (
    BAD_AUTH,
    NO_ACCESS,
    NOT_FOUND,
    SERVER_ERROR,
    OperationResult,
    failure,
    success,
)

logger = logging.getLogger(__name__)

_REPO_PATTERN = re.compile(r"^[-a-zA-Z\d][-\w.]{0,213}/[-a-zA-Z\d][-\w.]{0,213}$")


class GitHubOwnership:
    """
    Checks whether a user is a collaborator on a GitHub repository.
    Walks the repository's collaborator list looking for the user's node id.
    """

    def __init__(self, api_url: Optional[str] = None, timeout: Optional[int] = None):
        """
        Initialize the ownership checker.

        Args:
            api_url: GitHub API base URL, defaults to settings.github_api_url
            timeout: Request timeout in seconds, defaults to settings.github_timeout
        """
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self.timeout = timeout or settings.github_timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/vnd.github.v3+json"})

    def check_ownership(self, user: Dict[str, Any], repo: str) -> OperationResult:
        """
        Determine the role a user holds on ``owner/repo``.

        Args:
            user: Dict with the user's "token" and "node_id"
            repo: Repository in "owner/repo" form

        Returns:
            OperationResult with the role name on success, otherwise one of
            Bad Auth, No Access, Not Found or Server Error.
        """
        if not _REPO_PATTERN.match(repo or ""):
            return failure(NOT_FOUND, f"Invalid repository: {repo}")

        url = f"{self.api_url}/repos/{repo}/collaborators"
        headers = {"Authorization": f"Bearer {user.get('token', '')}"}

        while url:
            try:
                response = self.session.get(url, headers=headers, timeout=self.timeout)
            except requests.exceptions.Timeout:
                logger.error(f"Timeout checking ownership of {repo}")
                return failure(SERVER_ERROR, f"Timed out contacting GitHub for {repo}")
            except requests.exceptions.RequestException as e:
                logger.error(f"Error checking ownership of {repo}: {e}")
                return failure(SERVER_ERROR, f"Could not reach GitHub for {repo}")

            if response.status_code == 401:
                logger.warning(f"GitHub rejected credentials while checking {repo}")
                return failure(BAD_AUTH, "GitHub rejected the user's credentials")
            if response.status_code == 404:
                logger.warning(f"Repository not found: {repo}")
                return failure(NOT_FOUND, f"Repository {repo} not found")
            if response.status_code != 200:
                logger.error(f"GitHub API error {response.status_code}: {response.text}")
                return failure(SERVER_ERROR, f"GitHub returned {response.status_code}")

            for collaborator in response.json():
                if collaborator.get("node_id") == user.get("node_id"):
                    role = collaborator.get("role_name")
                    logger.info(f"User {user.get('node_id')} holds role {role} on {repo}")
                    return success(role)

            url = response.links.get("next", {}).get("url")

        logger.info(f"User {user.get('node_id')} is not a collaborator on {repo}")
        return failure(NO_ACCESS, f"User is not a collaborator on {repo}")


def check_ownership(user: Dict[str, Any], repo: str) -> OperationResult:
    """Ownership check against the configured GitHub API."""
    return GitHubOwnership().check_ownership(user, repo)
