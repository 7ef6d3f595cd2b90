"""
Tests for hosting driver detection and the shared request helpers.
"""

from __future__ import annotations

from unittest.mock import Mock

import httpx
import pytest

from branchwright.core.config import BranchwrightConfig, HostingConfig
from branchwright.core.hosting import (
    BitbucketDriver,
    GitHubDriver,
    GitLabDriver,
    GiteaDriver,
    HostingDriver,
    HostingRequestError,
    list_drivers,
    new_driver,
    register_driver,
    split_commit_message,
)
from branchwright.core.hosting.base import merge_commit_sha, request_json


class TestNewDriver:
    @pytest.mark.parametrize(
        "remote,driver_class",
        [
            ("git@github.com:org/repo.git", GitHubDriver),
            ("https://gitlab.com/org/repo.git", GitLabDriver),
            ("git@gitea.com:org/repo.git", GiteaDriver),
            ("git@bitbucket.org:org/repo.git", BitbucketDriver),
        ],
    )
    def test_detects_by_host(self, mock_git, remote, driver_class) -> None:
        mock_git.remote_url.return_value = remote

        driver = new_driver(BranchwrightConfig(), mock_git)

        assert isinstance(driver, driver_class)
        assert isinstance(driver, HostingDriver)

    def test_unknown_host(self, mock_git) -> None:
        mock_git.remote_url.return_value = "git@git.example.com:org/repo.git"

        assert new_driver(BranchwrightConfig(), mock_git) is None

    def test_configured_service(self, mock_git) -> None:
        mock_git.remote_url.return_value = "git@git.example.com:org/repo.git"
        config = BranchwrightConfig(hosting=HostingConfig(service="gitea"))

        driver = new_driver(config, mock_git)

        assert isinstance(driver, GiteaDriver)
        assert driver.repository_url() == "https://git.example.com/org/repo"

    def test_origin_override(self, mock_git) -> None:
        mock_git.remote_url.return_value = "git@work-identity:org/repo.git"
        config = BranchwrightConfig(hosting=HostingConfig(origin_hostname="gitlab.com"))

        assert isinstance(new_driver(config, mock_git), GitLabDriver)

    def test_no_origin(self, mock_git) -> None:
        mock_git.remote_url.return_value = None

        assert new_driver(BranchwrightConfig(), mock_git) is None

    def test_local_path_origin(self, mock_git) -> None:
        mock_git.remote_url.return_value = "/srv/git/repo.git"

        assert new_driver(BranchwrightConfig(), mock_git) is None


class TestRegistry:
    def test_detection_order(self) -> None:
        assert list_drivers() == ["github", "gitlab", "gitea", "bitbucket"]

    def test_duplicate_registration(self) -> None:
        with pytest.raises(ValueError, match="already registered"):
            register_driver("github")(lambda url, config, log=None, client=None: None)


class TestRequestJson:
    def client(self, response: httpx.Response) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(lambda request: response))

    def test_decodes_json(self) -> None:
        client = self.client(httpx.Response(200, json={"a": 1}))

        assert request_json(client, "GET", "https://example.com/x") == {"a": 1}

    def test_empty_body(self) -> None:
        client = self.client(httpx.Response(204))

        assert request_json(client, "POST", "https://example.com/x") is None

    def test_status_error(self) -> None:
        client = self.client(httpx.Response(503))

        with pytest.raises(HostingRequestError) as exc_info:
            request_json(client, "GET", "https://example.com/x")

        assert exc_info.value.status_code == 503

    def test_invalid_json(self) -> None:
        client = self.client(httpx.Response(200, content=b"<html>"))

        with pytest.raises(HostingRequestError, match="invalid JSON"):
            request_json(client, "GET", "https://example.com/x")

    def test_transport_error(self) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(fail))

        with pytest.raises(HostingRequestError) as exc_info:
            request_json(client, "GET", "https://example.com/x")

        assert exc_info.value.status_code is None


@pytest.mark.parametrize(
    "message,expected",
    [
        ("title", ("title", "")),
        ("title\nline1\nline2", ("title", "line1\nline2")),
        ("title\n\nbody\n", ("title", "body")),
    ],
)
def test_split_commit_message(message, expected) -> None:
    assert split_commit_message(message) == expected


class TestMergeCommitSha:
    def test_known_sha(self) -> None:
        log = Mock()

        assert merge_commit_sha(log, "GitHub", 3, "abc123") == "abc123"
        log.assert_not_called()

    @pytest.mark.parametrize("sha", [None, ""])
    def test_missing_sha_is_logged(self, sha) -> None:
        log = Mock()

        assert merge_commit_sha(log, "GitHub", 3, sha) == ""
        log.assert_called_once_with(
            "%s API: PR #%d is merged but has no merge commit SHA yet", "GitHub", 3
        )
