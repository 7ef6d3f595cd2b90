"""
Pruning of merged branches.

A local branch whose tracking branch disappeared from origin has been
shipped (or abandoned) elsewhere; pruning deletes it locally. Perennial
branches are never pruned.
"""

from __future__ import annotations

from branchwright.core.repository import Repository
from branchwright.core.steps.models import CheckoutBranchStep, DeleteLocalBranchStep
from branchwright.core.steps.step_list import StepList


def prune_branches_steps(repo: Repository) -> StepList:
    """
    Plan deleting local branches whose tracking branch is gone.

    Run after a ``git fetch --prune`` so the tracking information is
    current. If the checked-out branch gets deleted, the main branch is
    checked out first.

    Raises:
        GitError: If querying the repository fails
    """
    config = repo.config
    current = repo.git.current_branch()
    gone = [
        name
        for name in repo.git.branches_with_deleted_tracking_branch()
        if config.is_feature_branch(name)
    ]

    steps = StepList()
    if current in gone:
        steps.append(CheckoutBranchStep(branch_name=config.main_branch))
    for name in gone:
        steps.append(DeleteLocalBranchStep(branch_name=name, force=True))
    return steps
