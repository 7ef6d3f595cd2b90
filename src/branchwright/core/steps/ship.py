"""
Ship planning.

Shipping completes a feature branch's lifecycle: the parent and the branch
are synced, the branch lands on its parent as a single squashed commit
(through the pull request when the hosting API can merge it, locally
otherwise), and the branch is removed locally and on origin.
"""

from __future__ import annotations

import logging

from branchwright.core.hosting.models import PullRequestInfo
from branchwright.core.repository import Repository
from branchwright.core.steps.models import (
    CheckoutBranchStep,
    DeleteLocalBranchStep,
    DeleteRemoteBranchStep,
    FetchStep,
    MergeBranchStep,
    MergePullRequestStep,
    PushBranchStep,
    SquashMergeStep,
)
from branchwright.core.steps.step_list import StepList
from branchwright.core.steps.sync import sync_branch_steps

logger = logging.getLogger(__name__)


class ShipError(Exception):
    """The branch can't be shipped."""

    pass


def ship_steps(
    branch_name: str,
    repo: Repository,
    *,
    commit_message: str | None = None,
    pull_request: PullRequestInfo | None = None,
    return_to: str | None = None,
) -> StepList:
    """
    Plan shipping a feature branch into its parent.

    Run ``fetch_steps`` before calling this so tracking branches are current.

    Args:
        branch_name: Feature branch to ship
        repo: Repository to query
        commit_message: Squash commit message; defaults to the pull request's
            suggested message, or git's prepared squash message for local merges
        pull_request: Result of the hosting driver's pull request lookup
        return_to: Branch to check out at the end, unless it is the shipped one

    Returns:
        Steps that sync, merge and delete the branch

    Raises:
        ShipError: If the branch isn't a feature branch
        GitError: If querying the repository fails
    """
    config = repo.config
    git = repo.git
    if not config.is_feature_branch(branch_name):
        raise ShipError(f"The branch '{branch_name}' is not a feature branch")

    parent = config.parent_branch(branch_name)
    online = git.has_remote("origin") and not config.is_offline()
    has_tracking_branch = git.has_tracking_branch(branch_name)
    merge_with_api = bool(online and pull_request and pull_request.can_merge_with_api)

    steps = StepList()
    steps.append_list(sync_branch_steps(parent, True, repo))
    steps.append_list(sync_branch_steps(branch_name, merge_with_api, repo))
    steps.append(CheckoutBranchStep(branch_name=parent))

    if merge_with_api and pull_request is not None:
        message = commit_message or pull_request.default_commit_message
        steps.append(
            MergePullRequestStep(
                branch_name=branch_name,
                parent_branch=parent,
                pull_request_number=pull_request.pull_request_number,
                commit_message=message,
            )
        )
        steps.append(FetchStep())
        steps.append(MergeBranchStep(branch_name=git.tracking_branch_name(parent)))
    else:
        steps.append(SquashMergeStep(branch_name=branch_name, commit_message=commit_message))
        if online:
            steps.append(PushBranchStep(branch_name=parent))

    if online and (has_tracking_branch or merge_with_api):
        steps.append(DeleteRemoteBranchStep(branch_name=branch_name))
    steps.append(DeleteLocalBranchStep(branch_name=branch_name, force=True))

    if return_to and return_to != branch_name:
        steps.append(CheckoutBranchStep(branch_name=return_to))

    logger.debug(
        "Shipping %s into %s %s", branch_name, parent, "via API" if merge_with_api else "locally"
    )
    return steps
