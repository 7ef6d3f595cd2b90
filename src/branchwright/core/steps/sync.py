"""
Branch sync planning.

Decides which steps bring a branch in sync with its tracking branch, its
parent, and (for the main branch of a fork) the upstream repository.
Planning only reads repository state; every query finishes before any
step runs, so a plan is never invalidated by its own steps. Fetching
changes which tracking branches exist, so ``fetch_steps`` runs to
completion before anything is planned.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from branchwright.core.repository import Repository
from branchwright.core.steps.models import (
    CheckoutBranchStep,
    CreateTrackingBranchStep,
    FetchStep,
    FetchUpstreamStep,
    MergeBranchStep,
    PushBranchStep,
    RebaseBranchStep,
)
from branchwright.core.steps.step_list import StepList

logger = logging.getLogger(__name__)


@dataclass
class BranchSyncResult:
    """The steps planned for one branch."""

    branch_name: str
    steps: StepList = field(default_factory=StepList)


def sync_branch_steps(branch_name: str, push_branch: bool, repo: Repository) -> StepList:
    """
    Plan the steps that sync one branch.

    Feature branches merge their tracking branch and then their parent.
    Perennial branches merge or rebase their tracking branch according to
    the pull strategy, and the main branch additionally rebases onto
    ``upstream/<main>`` when an upstream remote exists and upstream sync is
    enabled. With ``push_branch`` the branch is pushed afterwards, creating
    its tracking branch if needed.

    Args:
        branch_name: Branch to sync
        push_branch: Whether to push the branch after syncing it
        repo: Repository to query

    Returns:
        Ordered steps; empty for a perennial branch when there is no origin

    Raises:
        GitError: If querying the repository fails
    """
    config = repo.config
    git = repo.git
    is_feature = config.is_feature_branch(branch_name)
    has_origin = git.has_remote("origin")
    if not has_origin and not is_feature:
        return StepList()

    has_tracking_branch = git.has_tracking_branch(branch_name)

    result = StepList()
    result.append(CheckoutBranchStep(branch_name=branch_name))
    if is_feature:
        result.append_list(_sync_feature_branch_steps(branch_name, has_tracking_branch, repo))
    else:
        result.append_list(_sync_perennial_branch_steps(branch_name, has_tracking_branch, repo))

    if push_branch and has_origin and not config.is_offline():
        if has_tracking_branch:
            result.append(PushBranchStep(branch_name=branch_name))
        else:
            result.append(CreateTrackingBranchStep(branch_name=branch_name))
    return result


def _sync_feature_branch_steps(
    branch_name: str, has_tracking_branch: bool, repo: Repository
) -> StepList:
    result = StepList()
    if has_tracking_branch:
        result.append(MergeBranchStep(branch_name=repo.git.tracking_branch_name(branch_name)))
    # Always merge, never rebase: keeps a stable merge base for the squash merge on ship
    result.append(MergeBranchStep(branch_name=repo.config.parent_branch(branch_name)))
    return result


def _sync_perennial_branch_steps(
    branch_name: str, has_tracking_branch: bool, repo: Repository
) -> StepList:
    config = repo.config
    result = StepList()
    if has_tracking_branch:
        tracking_branch = repo.git.tracking_branch_name(branch_name)
        if config.pull_branch_strategy == "rebase":
            result.append(RebaseBranchStep(branch_name=tracking_branch))
        else:
            result.append(MergeBranchStep(branch_name=tracking_branch))

    main_branch = config.main_branch
    has_upstream = repo.git.has_remote("upstream")
    if branch_name == main_branch and has_upstream and config.should_sync_upstream():
        result.append(FetchUpstreamStep(branch_name=main_branch))
        result.append(RebaseBranchStep(branch_name=f"upstream/{main_branch}"))
    return result


def fetch_steps(repo: Repository) -> StepList:
    """Steps to run before planning: a pruning fetch from origin, unless offline."""
    if not repo.git.has_remote("origin") or repo.config.is_offline():
        return StepList()
    return StepList([FetchStep()])


def plan_sync(
    branch_names: Iterable[str], push_branch: bool, repo: Repository
) -> list[BranchSyncResult]:
    """
    Plan the sync of several branches before any of them is touched.

    Raises:
        GitError: If querying the repository fails for any branch
    """
    return [
        BranchSyncResult(branch_name=name, steps=sync_branch_steps(name, push_branch, repo))
        for name in branch_names
    ]


def sync_steps_for(
    results: Iterable[BranchSyncResult],
    *,
    return_to: str | None = None,
) -> StepList:
    """
    Combine planned branch syncs into one step list ending with a checkout
    of ``return_to``.
    """
    steps = StepList()
    for result in results:
        logger.debug("Planned %d steps for %s", len(result.steps), result.branch_name)
        steps.append_list(result.steps)
    if return_to:
        steps.append(CheckoutBranchStep(branch_name=return_to))
    return steps


def branches_in_sync_order(branch_names: Iterable[str], repo: Repository) -> list[str]:
    """
    Order branches so that parents sync before their children.

    The main branch comes first, then other perennial branches, then
    feature branches by depth in the lineage.
    """
    config = repo.config

    def sort_key(name: str) -> tuple[int, int, str]:
        if name == config.main_branch:
            return (0, 0, name)
        if config.is_perennial_branch(name):
            return (1, 0, name)
        return (2, len(config.ancestor_branches(name)), name)

    return sorted(branch_names, key=sort_key)
