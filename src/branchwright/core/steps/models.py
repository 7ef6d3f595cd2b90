"""
Step models for branchwright.

A step is one atomic git operation. Steps are immutable Pydantic models
tagged with a ``kind`` literal; ``Step`` is the closed union of all of
them. Steps that can stop half-way (merge, rebase, squash merge) raise
ConflictError and know which steps abort or finish the operation.

Example:
    >>> step = MergeBranchStep(branch_name="origin/feature")
    >>> step.describe()
    'git merge --no-edit origin/feature'
    >>> step.create_abort_steps()
    [AbortMergeStep(kind='abort_merge')]
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from branchwright.core.git import ConflictError, GitError
from branchwright.core.hosting.base import HostingError
from branchwright.core.hosting.models import MergePullRequestOptions

if TYPE_CHECKING:
    from branchwright.core.repository import Repository

logger = logging.getLogger(__name__)


class BaseStep(BaseModel):
    """Behavior shared by all steps."""

    model_config = ConfigDict(frozen=True)

    def run(self, repo: Repository) -> None:
        """
        Execute the step.

        Raises:
            ConflictError: If a merge-like step stopped on conflicts
            GitError: If the git command fails for any other reason
        """
        raise NotImplementedError

    def describe(self) -> str:
        """The git command this step runs, for display."""
        raise NotImplementedError

    def create_abort_steps(self) -> list[Step]:
        """Steps that undo this step after it stopped on a conflict."""
        return []

    def create_continue_steps(self) -> list[Step]:
        """Steps that finish this step once its conflicts are resolved."""
        return []


def _raise_if_conflicted(repo: Repository, error: GitError) -> None:
    """Re-raise a failed merge-like command as ConflictError when it left conflicts."""
    git = repo.git
    if git.has_conflicts() or git.is_merge_in_progress() or git.is_rebase_in_progress():
        raise ConflictError(str(error), command=error.command, stderr=error.stderr) from error


# ----------------------------------------------------------------------
# Branch steps
# ----------------------------------------------------------------------


class CheckoutBranchStep(BaseStep):
    """Check out a local branch."""

    kind: Literal["checkout_branch"] = "checkout_branch"
    branch_name: str

    def run(self, repo: Repository) -> None:
        if repo.git.current_branch() != self.branch_name:
            repo.git.run("checkout", self.branch_name)

    def describe(self) -> str:
        return f"git checkout {self.branch_name}"


class MergeBranchStep(BaseStep):
    """Merge a branch into the checked-out branch."""

    kind: Literal["merge_branch"] = "merge_branch"
    branch_name: str

    def run(self, repo: Repository) -> None:
        try:
            repo.git.run("merge", "--no-edit", self.branch_name)
        except GitError as e:
            _raise_if_conflicted(repo, e)
            raise

    def describe(self) -> str:
        return f"git merge --no-edit {self.branch_name}"

    def create_abort_steps(self) -> list[Step]:
        return [AbortMergeStep()]

    def create_continue_steps(self) -> list[Step]:
        return [ContinueMergeStep()]


class RebaseBranchStep(BaseStep):
    """Rebase the checked-out branch onto another branch."""

    kind: Literal["rebase_branch"] = "rebase_branch"
    branch_name: str

    def run(self, repo: Repository) -> None:
        try:
            repo.git.run("rebase", self.branch_name)
        except GitError as e:
            _raise_if_conflicted(repo, e)
            raise

    def describe(self) -> str:
        return f"git rebase {self.branch_name}"

    def create_abort_steps(self) -> list[Step]:
        return [AbortRebaseStep()]

    def create_continue_steps(self) -> list[Step]:
        return [ContinueRebaseStep()]


class SquashMergeStep(BaseStep):
    """Squash-merge a branch into the checked-out branch as one commit."""

    kind: Literal["squash_merge"] = "squash_merge"
    branch_name: str
    commit_message: str | None = None

    def run(self, repo: Repository) -> None:
        try:
            repo.git.run("merge", "--squash", self.branch_name)
        except GitError as e:
            if repo.git.has_conflicts():
                raise ConflictError(str(e), command=e.command, stderr=e.stderr) from e
            raise
        CommitStep(message=self.commit_message).run(repo)

    def describe(self) -> str:
        return f"git merge --squash {self.branch_name}"

    def create_abort_steps(self) -> list[Step]:
        return [DiscardChangesStep()]

    def create_continue_steps(self) -> list[Step]:
        return [CommitStep(message=self.commit_message)]


class PushBranchStep(BaseStep):
    """Push a branch to its existing tracking branch."""

    kind: Literal["push_branch"] = "push_branch"
    branch_name: str

    def run(self, repo: Repository) -> None:
        repo.git.run("push", "origin", self.branch_name)

    def describe(self) -> str:
        return f"git push origin {self.branch_name}"


class CreateTrackingBranchStep(BaseStep):
    """Push a local-only branch to origin and set it as upstream."""

    kind: Literal["create_tracking_branch"] = "create_tracking_branch"
    branch_name: str

    def run(self, repo: Repository) -> None:
        repo.git.run("push", "-u", "origin", self.branch_name)

    def describe(self) -> str:
        return f"git push -u origin {self.branch_name}"


class FetchUpstreamStep(BaseStep):
    """Fetch a branch from the upstream remote."""

    kind: Literal["fetch_upstream"] = "fetch_upstream"
    branch_name: str

    def run(self, repo: Repository) -> None:
        repo.git.run("fetch", "upstream", self.branch_name)

    def describe(self) -> str:
        return f"git fetch upstream {self.branch_name}"


class FetchStep(BaseStep):
    """Fetch all branches and tags from a remote, pruning deleted branches."""

    kind: Literal["fetch"] = "fetch"
    remote: str = "origin"

    def run(self, repo: Repository) -> None:
        repo.git.run("fetch", "--prune", "--tags", self.remote)

    def describe(self) -> str:
        return f"git fetch --prune --tags {self.remote}"


class DeleteLocalBranchStep(BaseStep):
    kind: Literal["delete_local_branch"] = "delete_local_branch"
    branch_name: str
    force: bool = False

    def run(self, repo: Repository) -> None:
        repo.git.run("branch", "-D" if self.force else "-d", self.branch_name)

    def describe(self) -> str:
        return f"git branch {'-D' if self.force else '-d'} {self.branch_name}"


class DeleteRemoteBranchStep(BaseStep):
    kind: Literal["delete_remote_branch"] = "delete_remote_branch"
    branch_name: str

    def run(self, repo: Repository) -> None:
        repo.git.run("push", "origin", f":{self.branch_name}")

    def describe(self) -> str:
        return f"git push origin :{self.branch_name}"


# ----------------------------------------------------------------------
# Steps finishing or undoing an interrupted operation
# ----------------------------------------------------------------------


class AbortMergeStep(BaseStep):
    kind: Literal["abort_merge"] = "abort_merge"

    def run(self, repo: Repository) -> None:
        repo.git.run("merge", "--abort")

    def describe(self) -> str:
        return "git merge --abort"


class ContinueMergeStep(BaseStep):
    """Commit a merge whose conflicts the user resolved."""

    kind: Literal["continue_merge"] = "continue_merge"

    def run(self, repo: Repository) -> None:
        if repo.git.has_conflicts():
            raise ConflictError("You must resolve the conflicts before continuing")
        if repo.git.is_merge_in_progress():
            repo.git.run("commit", "--no-edit")

    def describe(self) -> str:
        return "git commit --no-edit"

    def create_abort_steps(self) -> list[Step]:
        return [AbortMergeStep()]

    def create_continue_steps(self) -> list[Step]:
        return [ContinueMergeStep()]


class AbortRebaseStep(BaseStep):
    kind: Literal["abort_rebase"] = "abort_rebase"

    def run(self, repo: Repository) -> None:
        repo.git.run("rebase", "--abort")

    def describe(self) -> str:
        return "git rebase --abort"


class ContinueRebaseStep(BaseStep):
    """Continue a rebase whose conflicts the user resolved."""

    kind: Literal["continue_rebase"] = "continue_rebase"

    def run(self, repo: Repository) -> None:
        if repo.git.has_conflicts():
            raise ConflictError("You must resolve the conflicts before continuing")
        if not repo.git.is_rebase_in_progress():
            return
        try:
            repo.git.run("-c", "core.editor=true", "rebase", "--continue")
        except GitError as e:
            _raise_if_conflicted(repo, e)
            raise

    def describe(self) -> str:
        return "git rebase --continue"

    def create_abort_steps(self) -> list[Step]:
        return [AbortRebaseStep()]

    def create_continue_steps(self) -> list[Step]:
        return [ContinueRebaseStep()]


class CommitStep(BaseStep):
    """Commit the staged changes, using git's prepared message when none is given."""

    kind: Literal["commit"] = "commit"
    message: str | None = None

    def run(self, repo: Repository) -> None:
        if repo.git.has_conflicts():
            raise ConflictError("You must resolve the conflicts before continuing")
        if self.message:
            repo.git.run("commit", "-m", self.message)
        else:
            repo.git.run("commit", "--no-edit")

    def describe(self) -> str:
        return "git commit" + (" -m ..." if self.message else " --no-edit")

    def create_abort_steps(self) -> list[Step]:
        return [DiscardChangesStep()]

    def create_continue_steps(self) -> list[Step]:
        return [self]


class DiscardChangesStep(BaseStep):
    kind: Literal["discard_changes"] = "discard_changes"

    def run(self, repo: Repository) -> None:
        repo.git.run("reset", "--hard")

    def describe(self) -> str:
        return "git reset --hard"


# ----------------------------------------------------------------------
# Hosting steps
# ----------------------------------------------------------------------


class MergePullRequestStep(BaseStep):
    """Squash-merge the pull request of a branch through the hosting API."""

    kind: Literal["merge_pull_request"] = "merge_pull_request"
    branch_name: str
    parent_branch: str
    pull_request_number: int | None = None
    commit_message: str

    def run(self, repo: Repository) -> None:
        if repo.driver is None:
            raise HostingError("No hosting driver available to merge the pull request")
        sha = repo.driver.merge_pull_request(
            MergePullRequestOptions(
                branch=self.branch_name,
                parent_branch=self.parent_branch,
                pull_request_number=self.pull_request_number,
                commit_message=self.commit_message,
            )
        )
        logger.info("Merged pull request of %s as %s", self.branch_name, sha)

    def describe(self) -> str:
        number = f" #{self.pull_request_number}" if self.pull_request_number else ""
        return f"merge pull request{number} of {self.branch_name} into {self.parent_branch}"


Step = Annotated[
    Union[
        CheckoutBranchStep,
        MergeBranchStep,
        RebaseBranchStep,
        SquashMergeStep,
        PushBranchStep,
        CreateTrackingBranchStep,
        FetchUpstreamStep,
        FetchStep,
        DeleteLocalBranchStep,
        DeleteRemoteBranchStep,
        AbortMergeStep,
        ContinueMergeStep,
        AbortRebaseStep,
        ContinueRebaseStep,
        CommitStep,
        DiscardChangesStep,
        MergePullRequestStep,
    ],
    Field(discriminator="kind"),
]
