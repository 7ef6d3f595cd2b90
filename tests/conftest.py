"""
Pytest configuration and shared fixtures.

Provides temporary git repositories (with and without an origin remote),
an isolated configuration environment, and a mock git worker for
planner tests.
"""

import json
import subprocess
from pathlib import Path
from unittest.mock import Mock

import httpx
import pytest

from branchwright.core.config import BranchwrightConfig, clear_cache
from branchwright.core.git import GitRepo
from branchwright.core.repository import Repository

ENV_VARS = [
    "BRANCHWRIGHT_OFFLINE",
    "BRANCHWRIGHT_PULL_BRANCH_STRATEGY",
    "BRANCHWRIGHT_HOSTING_SERVICE",
    "GITHUB_TOKEN",
    "GITLAB_TOKEN",
    "GITEA_TOKEN",
    "BITBUCKET_TOKEN",
]


def git(cwd: Path, *args: str) -> str:
    """Run a git command in a test repository and return its stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str | None = None) -> None:
    """Write a file and commit it."""
    (repo / name).write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message or f"Update {name}")


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config, env vars and the config cache from leaking into tests."""
    xdg = tmp_path / "xdg"
    xdg.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    yield xdg
    clear_cache()


# ==============================================================================
# Git Repository Fixtures
# ==============================================================================


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository on branch main with one commit."""
    repo = tmp_path / "repo"
    repo.mkdir()

    git(repo, "init", "-q")
    git(repo, "checkout", "-q", "-b", "main")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "commit.gpgsign", "false")

    commit_file(repo, "README.md", "# Test Repo\n", "Initial commit")
    return repo


@pytest.fixture
def git_repo_with_origin(tmp_path: Path, git_repo: Path) -> Path:
    """Git repository whose main branch is pushed to a local bare origin."""
    origin = tmp_path / "origin.git"
    git(tmp_path, "init", "-q", "--bare", str(origin))
    git(git_repo, "remote", "add", "origin", str(origin))
    git(git_repo, "push", "-q", "-u", "origin", "main")
    return git_repo


def write_project_config(repo: Path, **settings) -> None:
    """Write a .branchwright.json into a repository."""
    (repo / ".branchwright.json").write_text(json.dumps(settings, indent=2))


# ==============================================================================
# Repository Context Fixtures
# ==============================================================================


@pytest.fixture
def repository(git_repo: Path) -> Repository:
    """Repository context for the temporary repository, without a hosting driver."""
    return Repository(git=GitRepo(git_repo), config=BranchwrightConfig())


@pytest.fixture
def mock_git() -> Mock:
    """
    Mock git worker describing a repository with an origin and no tracking branches.

    Tests adjust the return values to describe other repository states.
    """
    mock = Mock(spec=GitRepo)
    mock.has_remote.side_effect = lambda name: name == "origin"
    mock.has_tracking_branch.return_value = False
    mock.tracking_branch_name.side_effect = lambda branch: f"origin/{branch}"
    mock.current_branch.return_value = "main"
    mock.local_branches.return_value = ["main"]
    return mock


def make_repository(git_worker, **config) -> Repository:
    """Repository context around a (mock) git worker and config settings."""
    return Repository(git=git_worker, config=BranchwrightConfig(**config))


# ==============================================================================
# Helper Fixtures
# ==============================================================================


@pytest.fixture
def run_git():
    """Run git commands in test repositories: ``run_git(repo, "log")``."""
    return git


@pytest.fixture
def commit():
    """Write and commit a file: ``commit(repo, "a.txt", "content")``."""
    return commit_file


@pytest.fixture
def project_config():
    """Write .branchwright.json: ``project_config(repo, lineage={...})``."""
    return write_project_config


@pytest.fixture
def repo_factory():
    """Build a Repository around a git worker: ``repo_factory(mock_git, offline=True)``."""
    return make_repository


# ==============================================================================
# Hosting API Fixtures
# ==============================================================================


class FakeAPI:
    """
    Route table behind an httpx.MockTransport that records every request.

    Unregistered routes answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, object]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, json: object = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, json)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404)
        status, body = route
        if callable(body):
            return body(request)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def last(self, method: str) -> httpx.Request:
        return [r for r in self.requests if r.method == method][-1]


@pytest.fixture
def fake_api() -> FakeAPI:
    """Fake hosting API; pass ``fake_api.client()`` to a driver."""
    return FakeAPI()
