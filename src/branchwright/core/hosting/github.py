"""
GitHub hosting driver.

Talks to the GitHub REST API: ``https://api.github.com`` for github.com,
``https://<host>/api/v3`` for GitHub Enterprise Server.

API Endpoints:
- List: GET /repos/{owner}/{repo}/pulls?state=open&head={owner}:{branch}&base={parent}
- Retarget: PATCH /repos/{owner}/{repo}/pulls/{number}
- Merge: PUT /repos/{owner}/{repo}/pulls/{number}/merge
- Detail: GET /repos/{owner}/{repo}/pulls/{number}
"""

from __future__ import annotations

import logging
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


@register_driver("github")
def new_github_driver(
    url: RemoteURL,
    config: BranchwrightConfig,
    log: LogCallback | None = None,
    client: httpx.Client | None = None,
) -> GitHubDriver | None:
    """Create a GitHubDriver if the remote is hosted on GitHub."""
    if not serves("github", "github.com", url, config):
        return None
    return GitHubDriver(url, config, log, client)


class GitHubDriver:
    """
    Hosting driver for GitHub and GitHub Enterprise Server.

    Before merging, open pull requests based on the shipped branch are
    retargeted onto its parent so they survive the branch deletion.
    """

    PAGE_SIZE = 100

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
        self.token = config.hosting.github_token or ""
        self.log = log or logger.info
        self.client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        if self.hostname == "github.com":
            self.api_url = "https://api.github.com"
        else:
            self.api_url = f"https://{self.hostname}/api/v3"

    def hosting_service_name(self) -> str:
        return "GitHub"

    def repository_url(self) -> str:
        return f"https://{self.hostname}/{self.owner}/{self.repository}"

    def _repo_api(self, path: str = "") -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repository}{path}"

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
        }
        return request_json(self.client, method, url, headers=headers, **kwargs)

    def _open_pull_requests(self, **filters: str) -> list[dict[str, Any]]:
        pulls: list[dict[str, Any]] = []
        page = 1
        while True:
            params: dict[str, Any] = {"state": "open", "per_page": self.PAGE_SIZE, "page": page}
            params.update(filters)
            batch = self._request("GET", self._repo_api("/pulls"), params=params) or []
            pulls.extend(batch)
            if len(batch) < self.PAGE_SIZE:
                return pulls
            page += 1

    def load_pull_request_info(self, branch: str, parent_branch: str) -> PullRequestInfo:
        if not self.token:
            return PullRequestInfo(can_merge_with_api=False)
        self.log("GitHub API: Looking for pull requests of %s into %s", branch, parent_branch)
        head_label = f"{self.owner}:{branch}"
        matches = [
            PullRequest(number=pull["number"], title=pull.get("title") or "")
            for pull in self._open_pull_requests(head=head_label, base=parent_branch)
            if (pull.get("head") or {}).get("label") == head_label
            and (pull.get("base") or {}).get("ref") == parent_branch
        ]
        return pull_request_info(matches)

    def _retarget_child_pull_requests(self, branch: str, parent_branch: str) -> None:
        for pull in self._open_pull_requests(base=branch):
            number = pull["number"]
            self.log("GitHub API: Updating base branch for PR #%d to %s", number, parent_branch)
            self._request("PATCH", self._repo_api(f"/pulls/{number}"), json={"base": parent_branch})

    def merge_pull_request(self, options: MergePullRequestOptions) -> str:
        if not self.token:
            raise HostingError("cannot merge via the GitHub API without a github_token")
        number = resolve_pull_request_number(self, options)
        self._retarget_child_pull_requests(options.branch, options.parent_branch)
        title, body = split_commit_message(options.commit_message)
        self.log("GitHub API: Merging PR #%d", number)
        try:
            self._request(
                "PUT",
                self._repo_api(f"/pulls/{number}/merge"),
                json={"commit_title": title, "commit_message": body, "merge_method": "squash"},
            )
        except HostingRequestError as e:
            raise_for_merge_error(e, number)
            raise
        pull = self._request("GET", self._repo_api(f"/pulls/{number}")) or {}
        return merge_commit_sha(self.log, "GitHub", number, pull.get("merge_commit_sha"))
