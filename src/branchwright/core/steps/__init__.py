"""
Step-based workflow engine.

Workflows are planned as lists of atomic git steps and executed by the
runner, which stops on conflicts and offers abort/continue plans.

Example:
    >>> from branchwright.core.steps import StepRunner, sync_branch_steps
    >>> steps = sync_branch_steps("feature", push_branch=True, repo=repo)
    >>> result = StepRunner(repo).execute(steps)
    >>> if result.conflict:
    ...     print(result.conflict.message)
"""

from branchwright.core.steps.models import (
    AbortMergeStep,
    AbortRebaseStep,
    CheckoutBranchStep,
    CommitStep,
    ContinueMergeStep,
    ContinueRebaseStep,
    CreateTrackingBranchStep,
    DeleteLocalBranchStep,
    DeleteRemoteBranchStep,
    DiscardChangesStep,
    FetchStep,
    FetchUpstreamStep,
    MergeBranchStep,
    MergePullRequestStep,
    PushBranchStep,
    RebaseBranchStep,
    SquashMergeStep,
    Step,
)
from branchwright.core.steps.runner import (
    Conflict,
    RunnerCallback,
    RunResult,
    StepRunner,
    interrupted_operation,
)
from branchwright.core.steps.prune import prune_branches_steps
from branchwright.core.steps.ship import ShipError, ship_steps
from branchwright.core.steps.step_list import StepList
from branchwright.core.steps.sync import (
    BranchSyncResult,
    branches_in_sync_order,
    fetch_steps,
    plan_sync,
    sync_branch_steps,
    sync_steps_for,
)

__all__ = [
    "AbortMergeStep",
    "AbortRebaseStep",
    "BranchSyncResult",
    "CheckoutBranchStep",
    "CommitStep",
    "Conflict",
    "ContinueMergeStep",
    "ContinueRebaseStep",
    "CreateTrackingBranchStep",
    "DeleteLocalBranchStep",
    "DeleteRemoteBranchStep",
    "DiscardChangesStep",
    "FetchStep",
    "FetchUpstreamStep",
    "MergeBranchStep",
    "MergePullRequestStep",
    "PushBranchStep",
    "RebaseBranchStep",
    "RunResult",
    "RunnerCallback",
    "ShipError",
    "SquashMergeStep",
    "Step",
    "StepList",
    "StepRunner",
    "branches_in_sync_order",
    "fetch_steps",
    "interrupted_operation",
    "plan_sync",
    "prune_branches_steps",
    "ship_steps",
    "sync_branch_steps",
    "sync_steps_for",
]
