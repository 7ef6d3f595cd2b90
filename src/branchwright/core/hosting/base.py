"""
Hosting driver protocol and registry.

This module defines the HostingDriver protocol that every code-hosting
service implementation satisfies, plus the helpers they share for talking
to REST APIs.

- HostingDriver is a runtime_checkable Protocol
- Driver factories are registered with a decorator
- A factory returns None when the remote doesn't belong to its service
- new_driver() picks the first factory that accepts the origin remote
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from branchwright.core.config import BranchwrightConfig
from branchwright.core.git import GitRepo, RemoteURL, parse_remote_url
from branchwright.core.hosting.models import (
    MergePullRequestOptions,
    PullRequest,
    PullRequestInfo,
    default_commit_message,
)

logger = logging.getLogger(__name__)

LogCallback = Callable[..., None]
"""printf-style logger: ``log("Merging PR #%d", number)``."""

DEFAULT_TIMEOUT = 30.0


class HostingError(Exception):
    """Error from a hosting driver."""

    pass


class HostingRequestError(HostingError):
    """A request to the hosting API failed in transport or returned an unexpected status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PullRequestNotFoundError(HostingError):
    """The pull request to merge doesn't exist or was already merged."""

    pass


@runtime_checkable
class HostingDriver(Protocol):
    """
    Protocol for code-hosting service drivers.

    Drivers are responsible for:
    - Naming the service and the web URL of the repository
    - Finding the single open pull request from a branch into its parent
    - Squash-merging that pull request and reporting the merge commit
    """

    def hosting_service_name(self) -> str:
        """Human-readable name of the service (e.g. 'GitHub')."""
        ...

    def repository_url(self) -> str:
        """Web URL of the repository."""
        ...

    def load_pull_request_info(self, branch: str, parent_branch: str) -> PullRequestInfo:
        """
        Look up the pull request that merges ``branch`` into ``parent_branch``.

        Returns:
            PullRequestInfo; ``can_merge_with_api`` is False when no token is
            configured or when zero or several pull requests match

        Raises:
            HostingRequestError: If the listing request fails
        """
        ...

    def merge_pull_request(self, options: MergePullRequestOptions) -> str:
        """
        Squash-merge a pull request.

        Returns:
            SHA of the merge commit

        Raises:
            HostingError: If there is no pull request to merge
            PullRequestNotFoundError: If the API reports 404/409 for the merge
            HostingRequestError: On transport errors or unexpected statuses
        """
        ...


DriverFactory = Callable[
    [RemoteURL, BranchwrightConfig, Optional[LogCallback], Optional[httpx.Client]],
    Optional[HostingDriver],
]

# Driver registry, in detection order
_drivers: dict[str, DriverFactory] = {}


def register_driver(name: str) -> Callable[[DriverFactory], DriverFactory]:
    """
    Decorator to register a hosting driver factory.

    Usage:
        @register_driver("gitea")
        def new_gitea_driver(url, config, log=None, client=None):
            ...

    Raises:
        ValueError: If a driver with this name is already registered
    """

    def decorator(factory: DriverFactory) -> DriverFactory:
        if name in _drivers:
            raise ValueError(
                f"Driver '{name}' is already registered. "
                f"Available drivers: {', '.join(_drivers.keys())}"
            )
        _drivers[name] = factory
        return factory

    return decorator


def list_drivers() -> list[str]:
    """Names of all registered drivers, in detection order."""
    return list(_drivers.keys())


def new_driver(
    config: BranchwrightConfig,
    git: GitRepo,
    log: LogCallback | None = None,
    client: httpx.Client | None = None,
) -> HostingDriver | None:
    """
    Create the driver for the origin remote of a repository.

    Args:
        config: Loaded configuration (service override, hostname, tokens)
        git: Git worker used to read the origin URL
        log: Callback receiving API log messages
        client: Optional preconfigured HTTP client

    Returns:
        The matching driver, or None when the origin isn't on a known service

    Raises:
        ValueError: If the configured hosting service has no driver
    """
    remote = git.remote_url("origin")
    if not remote:
        return None
    url = parse_remote_url(remote)
    if url is None:
        logger.debug("Cannot parse origin URL %s", remote)
        return None

    if service := config.hosting_service():
        factory = _drivers.get(service)
        if factory is None:
            raise ValueError(f"Unknown hosting service '{service}'")
        return factory(url, config, log, client)

    for factory in _drivers.values():
        driver = factory(url, config, log, client)
        if driver is not None:
            return driver
    return None


# ----------------------------------------------------------------------
# Helpers shared by the driver implementations
# ----------------------------------------------------------------------


def hostname(url: RemoteURL, config: BranchwrightConfig) -> str:
    """Host of the repository, honoring the configured override."""
    return config.origin_override() or url.host


def serves(
    service: str,
    default_host: str,
    url: RemoteURL,
    config: BranchwrightConfig,
) -> bool:
    """Check whether a remote belongs to a service, by configuration or by host name."""
    configured = config.hosting_service()
    if configured:
        return configured == service
    return hostname(url, config) == default_host


def request_json(
    client: httpx.Client,
    method: str,
    url: str,
    **kwargs: Any,
) -> Any:
    """
    Issue one API request and decode its JSON body.

    Raises:
        HostingRequestError: On transport errors and non-2xx statuses
    """
    try:
        response = client.request(method, url, **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        raise HostingRequestError(
            f"{method} {url} failed with HTTP {status}", status_code=status
        ) from e
    except httpx.HTTPError as e:
        raise HostingRequestError(f"{method} {url} failed: {e}") from e

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise HostingRequestError(f"{method} {url} returned invalid JSON: {e}") from e


def pull_request_info(matches: list[PullRequest]) -> PullRequestInfo:
    """Turn the pull requests matching a branch into the lookup result."""
    if len(matches) != 1:
        return PullRequestInfo(can_merge_with_api=False)
    match = matches[0]
    return PullRequestInfo(
        can_merge_with_api=True,
        default_commit_message=default_commit_message(match),
        pull_request_number=match.number,
    )


def resolve_pull_request_number(
    driver: HostingDriver, options: MergePullRequestOptions
) -> int:
    """
    Number of the pull request to merge, looked up when not supplied.

    Raises:
        HostingError: If no single pull request matches the branch
    """
    if options.pull_request_number:
        return options.pull_request_number
    info = driver.load_pull_request_info(options.branch, options.parent_branch)
    if not info.can_merge_with_api or info.pull_request_number is None:
        raise HostingError(
            f"cannot merge via {driver.hosting_service_name()} "
            f"since there is no pull request for branch '{options.branch}'"
        )
    return info.pull_request_number


def raise_for_merge_error(error: HostingRequestError, number: int) -> None:
    """Raise PullRequestNotFoundError when a merge call failed with 404 or 409."""
    if error.status_code in (404, 409):
        raise PullRequestNotFoundError(
            f"pull request #{number} not found or already merged"
        ) from error


def merge_commit_sha(log: LogCallback, service: str, number: int, sha: Any) -> str:
    """
    SHA of the commit a merge produced, as read from the pull request detail.

    Some services compute it asynchronously, so right after the merge it may
    still be missing; that is logged and an empty string returned.
    """
    if not sha:
        log("%s API: PR #%d is merged but has no merge commit SHA yet", service, number)
        return ""
    return str(sha)
