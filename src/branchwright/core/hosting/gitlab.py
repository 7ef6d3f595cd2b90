"""
GitLab hosting driver.

Talks to the GitLab REST API (``https://<host>/api/v4``). Projects are
addressed by their URL-encoded path, so nested groups work unchanged.

API Endpoints:
- List: GET /projects/{id}/merge_requests?state=opened&source_branch=..&target_branch=..
- Merge: PUT /projects/{id}/merge_requests/{iid}/merge
- Detail: GET /projects/{id}/merge_requests/{iid}
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

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


@register_driver("gitlab")
def new_gitlab_driver(
    url: RemoteURL,
    config: BranchwrightConfig,
    log: LogCallback | None = None,
    client: httpx.Client | None = None,
) -> GitLabDriver | None:
    """Create a GitLabDriver if the remote is hosted on GitLab."""
    if not serves("gitlab", "gitlab.com", url, config):
        return None
    return GitLabDriver(url, config, log, client)


class GitLabDriver:
    """Hosting driver for gitlab.com and self-managed GitLab."""

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
        self.token = config.hosting.gitlab_token or ""
        self.log = log or logger.info
        self.client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        self.api_url = f"https://{self.hostname}/api/v4"

    def hosting_service_name(self) -> str:
        return "GitLab"

    def repository_url(self) -> str:
        return f"https://{self.hostname}/{self.owner}/{self.repository}"

    def _project_api(self, path: str = "") -> str:
        project_id = quote(f"{self.owner}/{self.repository}", safe="")
        return f"{self.api_url}/projects/{project_id}{path}"

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = {"PRIVATE-TOKEN": self.token}
        return request_json(self.client, method, url, headers=headers, **kwargs)

    def load_pull_request_info(self, branch: str, parent_branch: str) -> PullRequestInfo:
        if not self.token:
            return PullRequestInfo(can_merge_with_api=False)
        self.log("GitLab API: Looking for merge requests of %s into %s", branch, parent_branch)
        merge_requests: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = self._request(
                "GET",
                self._project_api("/merge_requests"),
                params={
                    "state": "opened",
                    "source_branch": branch,
                    "target_branch": parent_branch,
                    "per_page": self.PAGE_SIZE,
                    "page": page,
                },
            ) or []
            merge_requests.extend(batch)
            if len(batch) < self.PAGE_SIZE:
                break
            page += 1
        matches = [
            PullRequest(number=mr["iid"], title=mr.get("title") or "")
            for mr in merge_requests
            if mr.get("source_branch") == branch and mr.get("target_branch") == parent_branch
        ]
        return pull_request_info(matches)

    def merge_pull_request(self, options: MergePullRequestOptions) -> str:
        if not self.token:
            raise HostingError("cannot merge via the GitLab API without a gitlab_token")
        number = resolve_pull_request_number(self, options)
        title, body = split_commit_message(options.commit_message)
        message = f"{title}\n\n{body}" if body else title
        self.log("GitLab API: Merging MR !%d", number)
        try:
            self._request(
                "PUT",
                self._project_api(f"/merge_requests/{number}/merge"),
                json={
                    "squash": True,
                    "squash_commit_message": message,
                    "should_remove_source_branch": False,
                },
            )
        except HostingRequestError as e:
            raise_for_merge_error(e, number)
            raise
        merge_request = self._request("GET", self._project_api(f"/merge_requests/{number}")) or {}
        sha = merge_request.get("squash_commit_sha") or merge_request.get("merge_commit_sha")
        return merge_commit_sha(self.log, "GitLab", number, sha)
