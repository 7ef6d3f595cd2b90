"""
Git worker for branchwright.

Runs single git subcommands in a working tree and answers the read-only
questions the planners ask about repository state (remotes, tracking
branches, in-progress merges and rebases).
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Exception raised when a git operation fails."""

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class ConflictError(GitError):
    """
    A merge or rebase stopped because of conflicts.

    The working tree is left with the operation in progress; it can be
    finished after the conflicts are resolved or aborted.
    """

    pass


class GitRepo:
    """
    Runs git commands inside a repository.

    Example:
        >>> git = GitRepo(Path("."))
        >>> git.current_branch()
        'main'
        >>> git.has_remote("origin")
        True
    """

    TIMEOUT = 120

    def __init__(self, project_dir: Path | None = None) -> None:
        """
        Initialize the git worker.

        Args:
            project_dir: Root directory of the git repository.
                        Defaults to current working directory.
        """
        self.project_dir = (project_dir or Path.cwd()).resolve()

    def run(self, *args: str) -> str:
        """
        Run a git command and return its stdout.

        Args:
            *args: Git command arguments (without "git" prefix).

        Returns:
            Command stdout as string (stripped).

        Raises:
            GitError: If the command exits non-zero, times out, or git is missing.
        """
        cmd = ["git", *args]

        logger.debug("Running git command: %s", " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                cwd=self.project_dir,
                capture_output=True,
                text=True,
                timeout=self.TIMEOUT,
            )
        except subprocess.TimeoutExpired as e:
            raise GitError(f"Git command timed out: {' '.join(cmd)}", command=cmd) from e
        except FileNotFoundError as e:
            raise GitError("git not found in PATH", command=cmd) from e

        if result.returncode != 0:
            stderr = result.stderr.strip() if result.stderr else ""
            output = result.stdout.strip() if result.stdout else ""
            raise GitError(
                f"Git command failed: {' '.join(cmd)}",
                command=cmd,
                stderr=stderr or output,
            )

        return result.stdout.strip() if result.stdout else ""

    def _succeeds(self, *args: str) -> bool:
        try:
            self.run(*args)
            return True
        except GitError:
            return False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def remotes(self) -> list[str]:
        """Names of all configured remotes."""
        output = self.run("remote")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def has_remote(self, name: str) -> bool:
        """Check whether a remote with the given name is configured."""
        return name in self.remotes()

    def remote_url(self, name: str = "origin") -> str | None:
        """URL of the given remote, or None if it isn't configured."""
        try:
            return self.run("remote", "get-url", name) or None
        except GitError:
            return None

    def tracking_branch_name(self, branch: str) -> str:
        """Name of the remote-tracking branch for a local branch."""
        return f"origin/{branch}"

    def has_tracking_branch(self, branch: str) -> bool:
        """Check whether ``origin/<branch>`` exists locally."""
        output = self.run("branch", "-r", "--format=%(refname:short)")
        remote_branches = {line.strip() for line in output.splitlines()}
        return self.tracking_branch_name(branch) in remote_branches

    def current_branch(self) -> str:
        """Name of the checked-out branch (empty when HEAD is detached)."""
        return self.run("branch", "--show-current")

    def local_branches(self) -> list[str]:
        """Names of all local branches."""
        output = self.run("branch", "--format=%(refname:short)")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def has_local_branch(self, name: str) -> bool:
        return name in self.local_branches()

    def branches_with_deleted_tracking_branch(self) -> list[str]:
        """Local branches whose upstream branch no longer exists on the remote."""
        output = self.run(
            "for-each-ref",
            "--format=%(refname:short) %(upstream:track)",
            "refs/heads",
        )
        gone = []
        for line in output.splitlines():
            name, _, track = line.strip().partition(" ")
            if track.strip() == "[gone]":
                gone.append(name)
        return gone

    def has_conflicts(self) -> bool:
        """Check whether the working tree contains unmerged paths."""
        return bool(self.run("diff", "--name-only", "--diff-filter=U"))

    def has_uncommitted_changes(self) -> bool:
        return bool(self.run("status", "--porcelain", "--untracked-files=no"))

    def is_merge_in_progress(self) -> bool:
        return self._succeeds("rev-parse", "-q", "--verify", "MERGE_HEAD")

    def _git_path(self, name: str) -> Path:
        path = Path(self.run("rev-parse", "--git-path", name))
        if not path.is_absolute():
            path = self.project_dir / path
        return path

    def is_rebase_in_progress(self) -> bool:
        return any(self._git_path(name).exists() for name in ("rebase-merge", "rebase-apply"))

    def is_squash_in_progress(self) -> bool:
        """
        Check for an uncommitted ``merge --squash``.

        A squash merge leaves neither MERGE_HEAD nor a rebase directory, only
        SQUASH_MSG next to conflicted or staged changes.
        """
        if not self._git_path("SQUASH_MSG").exists():
            return False
        return self.has_conflicts() or not self._succeeds("diff", "--cached", "--quiet")

    def head_sha(self) -> str:
        return self.run("rev-parse", "HEAD")
