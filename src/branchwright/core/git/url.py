"""
Parsing of git remote URLs.

Turns the URL of a remote (as printed by ``git remote get-url``) into its
host, user, organization and repository parts, which the hosting drivers
use to address the code-hosting API.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

# user@host:org/repo(.git)
_SCP_PATTERN = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>[^/].*?)/?$")

# scheme://[user[:password]@]host[:port]/org/repo(.git)
_URL_PATTERN = re.compile(
    r"^(?P<scheme>[a-z][a-z0-9+.-]*)://"
    r"(?:(?P<user>[^@/:]+)(?::[^@/]*)?@)?"
    r"(?P<host>[^/:]+)(?::\d+)?/(?P<path>.+?)/?$"
)


class RemoteURL(BaseModel):
    """
    A parsed git remote URL.

    Example:
        >>> parse_remote_url("git@github.com:git-town/git-town.git")
        RemoteURL(host='github.com', user='git', org='git-town', repo='git-town')
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., description="Host name of the remote")
    user: str = Field(default="", description="User part of the URL, if any")
    org: str = Field(..., description="Owner, organization or group path")
    repo: str = Field(..., description="Repository name without .git")

    @property
    def full_name(self) -> str:
        """Full repository name (org/repo)."""
        return f"{self.org}/{self.repo}"


def _split_path(path: str) -> tuple[str, str] | None:
    if path.endswith(".git"):
        path = path[: -len(".git")]
    path = path.strip("/")
    org, _, repo = path.rpartition("/")
    if not org or not repo:
        return None
    return org, repo


def parse_remote_url(url: str) -> RemoteURL | None:
    """
    Parse a git remote URL.

    Handles formats:
    - git@github.com:org/repo.git
    - username@bitbucket.org:org/repo
    - ssh://git@host:2222/org/repo.git
    - https://host/group/subgroup/repo.git

    Args:
        url: Git remote URL

    Returns:
        RemoteURL, or None if the URL can't be parsed
    """
    url = url.strip()
    if not url:
        return None

    match = _URL_PATTERN.match(url) or _SCP_PATTERN.match(url)
    if not match:
        return None

    parts = _split_path(match.group("path"))
    if parts is None:
        return None

    return RemoteURL(
        host=match.group("host").lower(),
        user=match.group("user") or "",
        org=parts[0],
        repo=parts[1],
    )
