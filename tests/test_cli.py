"""
Tests for the branchwright CLI.

Commands run through typer's CliRunner against real temporary
repositories with a local bare origin, so no hosting driver is detected.

Tests cover:
- sync (dry run, pushing, conflicts)
- continue / abort after a conflict
- ship (local squash merge, rejected branches)
- prune-branches
- repo
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from typer.testing import CliRunner

from branchwright import __version__
from branchwright.cli import app
from branchwright.cli.errors import ExitCode

runner = CliRunner()


@pytest.fixture
def workspace(git_repo_with_origin: Path, monkeypatch) -> Path:
    """Repository with origin, used as the working directory."""
    monkeypatch.chdir(git_repo_with_origin)
    return git_repo_with_origin


@pytest.fixture
def feature_branch(workspace: Path, run_git, commit) -> Path:
    """Local-only feature branch with one commit, checked out."""
    run_git(workspace, "checkout", "-q", "-b", "feature")
    commit(workspace, "feature.txt", "feature work\n", "Feature work")
    return workspace


@pytest.fixture
def conflicted(feature_branch: Path, run_git, commit) -> Path:
    """Feature branch whose sync stopped on a merge conflict with main."""
    commit(feature_branch, "file.txt", "feature version\n")
    run_git(feature_branch, "checkout", "-q", "main")
    commit(feature_branch, "file.txt", "main version\n")
    run_git(feature_branch, "checkout", "-q", "feature")

    result = runner.invoke(app, ["sync"])

    assert result.exit_code == ExitCode.CONFLICT, result.output
    return feature_branch


@pytest.fixture
def squash_conflicted(feature_branch: Path, run_git, commit) -> Path:
    """main with a squash merge of feature stopped on conflicts."""
    commit(feature_branch, "file.txt", "feature version\n")
    run_git(feature_branch, "checkout", "-q", "main")
    commit(feature_branch, "file.txt", "main version\n")
    with pytest.raises(subprocess.CalledProcessError):
        run_git(feature_branch, "merge", "--squash", "feature")
    return feature_branch


def test_version() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_not_a_git_repository(tmp_path, monkeypatch) -> None:
    plain = tmp_path / "plain"
    plain.mkdir()
    monkeypatch.chdir(plain)

    result = runner.invoke(app, ["sync"])

    assert result.exit_code == ExitCode.USER_ERROR
    assert "Not a git repository" in result.output


class TestSync:
    def test_dry_run_changes_nothing(self, feature_branch, run_git) -> None:
        result = runner.invoke(app, ["sync", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "git fetch --prune --tags origin" in result.output
        assert "git push -u origin feature" in result.output
        assert "origin/feature" not in run_git(feature_branch, "branch", "-r")

    def test_sync_feature_branch(self, feature_branch, run_git, commit) -> None:
        run_git(feature_branch, "checkout", "-q", "main")
        commit(feature_branch, "main.txt", "main work\n", "Main work")
        run_git(feature_branch, "checkout", "-q", "feature")

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0, result.output
        assert "Synced main, feature" in result.output
        assert (feature_branch / "main.txt").exists()
        assert run_git(feature_branch, "branch", "--show-current") == "feature"
        assert "origin/feature" in run_git(feature_branch, "branch", "-r")

    def test_no_push(self, feature_branch, run_git) -> None:
        result = runner.invoke(app, ["sync", "--no-push"])

        assert result.exit_code == 0, result.output
        assert "origin/feature" not in run_git(feature_branch, "branch", "-r")

    def test_offline(self, feature_branch, run_git, project_config) -> None:
        project_config(feature_branch, offline=True)

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0, result.output
        assert "git fetch" not in result.output
        assert "origin/feature" not in run_git(feature_branch, "branch", "-r")

    def test_branch_deleted_on_origin(self, feature_branch, run_git) -> None:
        run_git(feature_branch, "push", "-q", "-u", "origin", "feature")
        run_git(feature_branch.parent / "origin.git", "branch", "-D", "feature")

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0, result.output
        assert "git merge --no-edit origin/feature" not in result.output
        assert "git push -u origin feature" in result.output

    def test_conflict_without_terminal(self, conflicted, run_git) -> None:
        status = run_git(conflicted, "status", "--porcelain")

        assert "UU file.txt" in status


class TestResolve:
    def test_continue_after_resolving(self, conflicted, run_git) -> None:
        (conflicted / "file.txt").write_text("resolved\n")
        run_git(conflicted, "add", "file.txt")

        result = runner.invoke(app, ["continue"])

        assert result.exit_code == 0, result.output
        assert run_git(conflicted, "status", "--porcelain") == ""
        parents = run_git(conflicted, "log", "-1", "--format=%P").split()
        assert len(parents) == 2

    def test_continue_while_unresolved(self, conflicted) -> None:
        result = runner.invoke(app, ["continue"])

        assert result.exit_code == ExitCode.CONFLICT

    def test_abort(self, conflicted) -> None:
        result = runner.invoke(app, ["abort"])

        assert result.exit_code == 0, result.output
        assert (conflicted / "file.txt").read_text() == "feature version\n"

    def test_continue_squash_merge(self, squash_conflicted, run_git) -> None:
        (squash_conflicted / "file.txt").write_text("resolved\n")
        run_git(squash_conflicted, "add", "file.txt")

        result = runner.invoke(app, ["continue"])

        assert result.exit_code == 0, result.output
        assert run_git(squash_conflicted, "status", "--porcelain") == ""
        assert len(run_git(squash_conflicted, "log", "-1", "--format=%P").split()) == 1

    def test_abort_squash_merge(self, squash_conflicted, run_git) -> None:
        result = runner.invoke(app, ["abort"])

        assert result.exit_code == 0, result.output
        assert (squash_conflicted / "file.txt").read_text() == "main version\n"
        assert run_git(squash_conflicted, "status", "--porcelain") == ""

    def test_nothing_to_continue(self, workspace) -> None:
        result = runner.invoke(app, ["continue"])

        assert result.exit_code == ExitCode.USER_ERROR
        assert "Nothing to continue" in result.output


class TestShip:
    def test_ship_locally(self, feature_branch, run_git) -> None:
        result = runner.invoke(app, ["ship", "-m", "Ship it"])

        assert result.exit_code == 0, result.output
        assert run_git(feature_branch, "branch", "--show-current") == "main"
        assert run_git(feature_branch, "log", "-1", "--format=%s", "main") == "Ship it"
        assert "feature" not in run_git(feature_branch, "branch", "--format=%(refname:short)")
        assert run_git(feature_branch, "rev-parse", "origin/main") == run_git(
            feature_branch, "rev-parse", "main"
        )
        assert (feature_branch / "feature.txt").exists()

    def test_ship_other_branch_returns_to_current(self, feature_branch, run_git) -> None:
        run_git(feature_branch, "checkout", "-q", "-b", "other", "main")

        result = runner.invoke(app, ["ship", "feature", "-m", "Ship feature"])

        assert result.exit_code == 0, result.output
        assert run_git(feature_branch, "branch", "--show-current") == "other"

    def test_ship_main_is_rejected(self, workspace) -> None:
        result = runner.invoke(app, ["ship"])

        assert result.exit_code == ExitCode.USER_ERROR
        assert "not a feature branch" in result.output

    def test_unknown_branch(self, workspace) -> None:
        result = runner.invoke(app, ["ship", "nope"])

        assert result.exit_code == ExitCode.USER_ERROR

    def test_uncommitted_changes(self, feature_branch) -> None:
        (feature_branch / "feature.txt").write_text("dirty\n")

        result = runner.invoke(app, ["ship"])

        assert result.exit_code == ExitCode.USER_ERROR
        assert "uncommitted changes" in result.output


class TestPruneBranches:
    def test_deletes_branch_removed_on_origin(self, workspace, run_git) -> None:
        run_git(workspace, "branch", "shipped")
        run_git(workspace, "push", "-q", "-u", "origin", "shipped")
        run_git(workspace, "push", "-q", "origin", ":shipped")

        result = runner.invoke(app, ["prune-branches"])

        assert result.exit_code == 0, result.output
        assert "shipped" not in run_git(workspace, "branch", "--format=%(refname:short)")

    def test_nothing_to_prune(self, workspace) -> None:
        result = runner.invoke(app, ["prune-branches"])

        assert result.exit_code == 0, result.output
        assert "No branches to prune" in result.output


class TestRepo:
    def test_unsupported_host(self, workspace) -> None:
        result = runner.invoke(app, ["repo"])

        assert result.exit_code == ExitCode.USER_ERROR
        assert "Unsupported hosting service" in result.output

    def test_prints_url(self, workspace, run_git) -> None:
        run_git(workspace, "remote", "set-url", "origin", "git@github.com:git-town/git-town.git")

        result = runner.invoke(app, ["repo"])

        assert result.exit_code == 0, result.output
        assert "https://github.com/git-town/git-town" in result.output


def test_invalid_configuration(workspace, project_config) -> None:
    project_config(workspace, pull_branch_strategy="octopus")

    result = runner.invoke(app, ["sync"])

    assert result.exit_code == ExitCode.USER_ERROR
    assert "Invalid configuration" in result.output
