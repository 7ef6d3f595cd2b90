"""
Code-hosting service drivers.

Each driver maps the same contract (service name, repository URL,
pull-request lookup, squash merge) onto the REST dialect of one service.
Importing this package registers all drivers.

Example:
    >>> from branchwright.core.hosting import new_driver
    >>> driver = new_driver(config, git)
    >>> info = driver.load_pull_request_info("feature", "main")
    >>> if info.can_merge_with_api:
    ...     sha = driver.merge_pull_request(options)
"""

from branchwright.core.hosting.base import (
    HostingDriver,
    HostingError,
    HostingRequestError,
    LogCallback,
    PullRequestNotFoundError,
    list_drivers,
    new_driver,
    register_driver,
)
from branchwright.core.hosting.models import (
    MergePullRequestOptions,
    PullRequestInfo,
    split_commit_message,
)

# Registration order is detection order
from branchwright.core.hosting.github import GitHubDriver, new_github_driver  # noqa: E402
from branchwright.core.hosting.gitlab import GitLabDriver, new_gitlab_driver  # noqa: E402
from branchwright.core.hosting.gitea import GiteaDriver, new_gitea_driver  # noqa: E402
from branchwright.core.hosting.bitbucket import BitbucketDriver, new_bitbucket_driver  # noqa: E402

__all__ = [
    "BitbucketDriver",
    "GitHubDriver",
    "GitLabDriver",
    "GiteaDriver",
    "HostingDriver",
    "HostingError",
    "HostingRequestError",
    "LogCallback",
    "MergePullRequestOptions",
    "PullRequestInfo",
    "PullRequestNotFoundError",
    "list_drivers",
    "new_bitbucket_driver",
    "new_driver",
    "new_gitea_driver",
    "new_github_driver",
    "new_gitlab_driver",
    "register_driver",
    "split_commit_message",
]
