"""
Bitbucket hosting driver.

Talks to the Bitbucket Cloud REST API 2.0 (``https://api.bitbucket.org/2.0``
for bitbucket.org, ``https://<host>/2.0`` otherwise). Listings come back as
paged envelopes (``{"values": [...], "next": ...}``).

API Endpoints:
- List: GET /repositories/{owner}/{repo}/pullrequests?state=OPEN&pagelen=50&page={page}
- Merge: POST /repositories/{owner}/{repo}/pullrequests/{id}/merge
- Detail: GET /repositories/{owner}/{repo}/pullrequests/{id}
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


@register_driver("bitbucket")
def new_bitbucket_driver(
    url: RemoteURL,
    config: BranchwrightConfig,
    log: LogCallback | None = None,
    client: httpx.Client | None = None,
) -> BitbucketDriver | None:
    """Create a BitbucketDriver if the remote is hosted on Bitbucket."""
    if not serves("bitbucket", "bitbucket.org", url, config):
        return None
    return BitbucketDriver(url, config, log, client)


def _branch_name(side: dict[str, Any] | None) -> str | None:
    return ((side or {}).get("branch") or {}).get("name")


def _repository_name(side: dict[str, Any] | None) -> str:
    return str(((side or {}).get("repository") or {}).get("full_name") or "")


class BitbucketDriver:
    """Hosting driver for Bitbucket."""

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
        self.token = config.hosting.bitbucket_token or ""
        self.log = log or logger.info
        self.client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        if self.hostname == "bitbucket.org":
            self.api_url = "https://api.bitbucket.org/2.0"
        else:
            self.api_url = f"https://{self.hostname}/2.0"

    def hosting_service_name(self) -> str:
        return "Bitbucket"

    def repository_url(self) -> str:
        return f"https://{self.hostname}/{self.owner}/{self.repository}"

    def _repo_api(self, path: str = "") -> str:
        return f"{self.api_url}/repositories/{self.owner}/{self.repository}{path}"

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = {"Authorization": f"Bearer {self.token}", "Accept": "application/json"}
        return request_json(self.client, method, url, headers=headers, **kwargs)

    def load_pull_request_info(self, branch: str, parent_branch: str) -> PullRequestInfo:
        if not self.token:
            return PullRequestInfo(can_merge_with_api=False)
        self.log("Bitbucket API: Looking for pull requests of %s into %s", branch, parent_branch)
        # Pull requests from forks carry the fork's full_name
        full_name = f"{self.owner}/{self.repository}".lower()
        pulls: list[dict[str, Any]] = []
        page = 1
        while True:
            envelope = self._request(
                "GET",
                self._repo_api("/pullrequests"),
                params={"state": "OPEN", "pagelen": self.PAGE_SIZE, "page": page},
            ) or {}
            batch = envelope.get("values") or []
            pulls.extend(batch)
            if len(batch) < self.PAGE_SIZE:
                break
            page += 1
        matches = [
            PullRequest(number=pull["id"], title=pull.get("title") or "")
            for pull in pulls
            if _branch_name(pull.get("source")) == branch
            and _repository_name(pull.get("source")).lower() == full_name
            and _branch_name(pull.get("destination")) == parent_branch
        ]
        return pull_request_info(matches)

    def merge_pull_request(self, options: MergePullRequestOptions) -> str:
        if not self.token:
            raise HostingError("cannot merge via the Bitbucket API without a bitbucket_token")
        number = resolve_pull_request_number(self, options)
        title, body = split_commit_message(options.commit_message)
        message = f"{title}\n\n{body}" if body else title
        self.log("Bitbucket API: Merging PR #%d", number)
        try:
            self._request(
                "POST",
                self._repo_api(f"/pullrequests/{number}/merge"),
                json={
                    "type": "pullrequest",
                    "message": message,
                    "merge_strategy": "squash",
                    "close_source_branch": False,
                },
            )
        except HostingRequestError as e:
            raise_for_merge_error(e, number)
            raise
        pull = self._request("GET", self._repo_api(f"/pullrequests/{number}")) or {}
        sha = (pull.get("merge_commit") or {}).get("hash")
        return merge_commit_sha(self.log, "Bitbucket", number, sha)
