"""
Gitea hosting driver.

Talks to the Gitea REST API (``https://<host>/api/v1``) of gitea.com or a
self-hosted installation.

API Endpoints:
- List: GET /repos/{owner}/{repo}/pulls?limit=50&page={page}&state=open
- Version: GET /version
- Merge: POST /repos/{owner}/{repo}/pulls/{number}/merge
- Detail: GET /repos/{owner}/{repo}/pulls/{number}
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from branchwright.core.config import BranchwrightConfig
from branchwright.core.git import RemoteURL
from branchwright.core.hosting.base import (
    DEFAULT_TIMEOUT,
    HostingError,
    HostingRequestError,
    LogCallback,
    hostname,
    merge_commit_sha,
    pull_request_info,
    raise_for_merge_error,
    register_driver,
    request_json,
    resolve_pull_request_number,
    serves,
)
from branchwright.core.hosting.models import (
    MergePullRequestOptions,
    PullRequest,
    PullRequestInfo,
    split_commit_message,
)

logger = logging.getLogger(__name__)

# First release that reads a separate squash title from MergeTitleField
TITLE_FIELD_VERSION = (1, 11, 5)


def parse_version(version: str) -> tuple[int, int, int] | None:
    """Parse the leading ``major.minor.patch`` of a Gitea version string."""
    match = re.match(r"v?(\d+)\.(\d+)(?:\.(\d+))?", version.strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)


@register_driver("gitea")
def new_gitea_driver(
    url: RemoteURL,
    config: BranchwrightConfig,
    log: LogCallback | None = None,
    client: httpx.Client | None = None,
) -> GiteaDriver | None:
    """Create a GiteaDriver if the remote is hosted on Gitea."""
    if not serves("gitea", "gitea.com", url, config):
        return None
    return GiteaDriver(url, config, log, client)


class GiteaDriver:
    """
    Hosting driver for Gitea.

    Example:
        >>> url = parse_remote_url("git@gitea.com:git-town/git-town.git")
        >>> driver = GiteaDriver(url, BranchwrightConfig())
        >>> driver.repository_url()
        'https://gitea.com/git-town/git-town'
    """

    PAGE_SIZE = 50

    def __init__(
        self,
        url: RemoteURL,
        config: BranchwrightConfig,
        log: LogCallback | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.hostname = hostname(url, config)
        self.owner = url.org
        self.repository = url.repo
        self.token = config.hosting.gitea_token or ""
        self.log = log or logger.info
        self.client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        self.api_url = f"https://{self.hostname}/api/v1"

    def hosting_service_name(self) -> str:
        return "Gitea"

    def repository_url(self) -> str:
        return f"https://{self.hostname}/{self.owner}/{self.repository}"

    def _repo_api(self, path: str = "") -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repository}{path}"

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = {"Authorization": f"token {self.token}", "Accept": "application/json"}
        return request_json(self.client, method, url, headers=headers, **kwargs)

    def _open_pull_requests(self) -> list[dict[str, Any]]:
        pulls: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = self._request(
                "GET",
                self._repo_api("/pulls"),
                params={"limit": self.PAGE_SIZE, "page": page, "state": "open"},
            ) or []
            pulls.extend(batch)
            if len(batch) < self.PAGE_SIZE:
                return pulls
            page += 1

    def load_pull_request_info(self, branch: str, parent_branch: str) -> PullRequestInfo:
        if not self.token:
            return PullRequestInfo(can_merge_with_api=False)
        self.log("Gitea API: Looking for pull requests of %s into %s", branch, parent_branch)
        head_label = f"{self.owner}/{branch}"
        matches = [
            PullRequest(number=pull["number"], title=pull.get("title") or "")
            for pull in self._open_pull_requests()
            if (pull.get("head") or {}).get("label") == head_label
            and (pull.get("base") or {}).get("label") == parent_branch
        ]
        return pull_request_info(matches)

    def _server_version(self) -> tuple[int, int, int] | None:
        data = self._request("GET", f"{self.api_url}/version") or {}
        return parse_version(str(data.get("version", "")))

    def _merge_payload(self, commit_message: str) -> dict[str, str]:
        title, body = split_commit_message(commit_message)
        version = self._server_version()
        if version is not None and version < TITLE_FIELD_VERSION:
            message = f"{title}\n\n{body}" if body else title
            return {"Do": "squash", "MergeMessageField": message}
        return {"Do": "squash", "MergeTitleField": title, "MergeMessageField": body}

    def merge_pull_request(self, options: MergePullRequestOptions) -> str:
        if not self.token:
            raise HostingError("cannot merge via the Gitea API without a gitea_token")
        number = resolve_pull_request_number(self, options)
        payload = self._merge_payload(options.commit_message)
        self.log("Gitea API: Merging PR #%d", number)
        try:
            self._request("POST", self._repo_api(f"/pulls/{number}/merge"), json=payload)
        except HostingRequestError as e:
            raise_for_merge_error(e, number)
            raise
        pull = self._request("GET", self._repo_api(f"/pulls/{number}")) or {}
        return merge_commit_sha(self.log, "Gitea", number, pull.get("merge_commit_sha"))
