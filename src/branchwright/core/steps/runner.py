"""
Sequential execution of step lists.

The runner executes steps strictly in order. When a merge-like step stops
on conflicts, execution halts and the result carries two continuations:
an abort plan that undoes the interrupted operation, and a continue plan
that finishes it and then runs the remaining steps. Any other failure
propagates to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from branchwright.core.git import ConflictError
from branchwright.core.repository import Repository
from branchwright.core.steps.models import (
    AbortMergeStep,
    AbortRebaseStep,
    CommitStep,
    ContinueMergeStep,
    ContinueRebaseStep,
    DiscardChangesStep,
    Step,
)
from branchwright.core.steps.step_list import StepList

logger = logging.getLogger(__name__)


class RunnerCallback(Protocol):
    """Protocol for runner event callbacks."""

    def on_step(self, step: Step) -> None:
        """Called right before a step runs.

        Args:
            step: The step about to run
        """
        ...


@dataclass
class Conflict:
    """A run halted by a conflict, with the ways to get out of it."""

    step: Step
    message: str
    abort_steps: StepList = field(default_factory=StepList)
    continue_steps: StepList = field(default_factory=StepList)


@dataclass
class RunResult:
    """Outcome of executing a step list."""

    executed: list[Step] = field(default_factory=list)
    conflict: Conflict | None = None

    @property
    def completed(self) -> bool:
        return self.conflict is None


class StepRunner:
    """
    Executes step lists against a repository.

    Example:
        >>> runner = StepRunner(repo)
        >>> result = runner.execute(sync_branch_steps("feature", True, repo))
        >>> if result.conflict:
        ...     # user resolves conflicts, then
        ...     result = runner.continue_run(result.conflict)
    """

    def __init__(self, repo: Repository, callback: RunnerCallback | None = None) -> None:
        self.repo = repo
        self.callback = callback

    def execute(self, steps: StepList | Iterable[Step]) -> RunResult:
        """
        Run steps in order until they finish or one stops on a conflict.

        Args:
            steps: Steps to run

        Returns:
            RunResult listing the executed steps and any conflict

        Raises:
            GitError: If a step fails for a reason other than a conflict
            HostingError: If a hosting step fails
        """
        pending = list(steps)
        result = RunResult()
        for index, step in enumerate(pending):
            if self.callback is not None:
                self.callback.on_step(step)
            logger.debug("Running step %s", step.describe())
            try:
                step.run(self.repo)
            except ConflictError as e:
                logger.info("Step '%s' stopped on a conflict", step.describe())
                continue_steps = StepList(step.create_continue_steps())
                continue_steps.append_list(pending[index + 1 :])
                result.conflict = Conflict(
                    step=step,
                    message=e.stderr or str(e),
                    abort_steps=StepList(step.create_abort_steps()),
                    continue_steps=continue_steps,
                )
                return result
            result.executed.append(step)
        return result

    def abort(self, conflict: Conflict) -> RunResult:
        """Undo the operation that stopped on a conflict. Remaining steps are dropped."""
        return self.execute(conflict.abort_steps)

    def continue_run(self, conflict: Conflict) -> RunResult:
        """Finish the interrupted operation, then run the steps that were still pending."""
        return self.execute(conflict.continue_steps)


def interrupted_operation(repo: Repository) -> Conflict | None:
    """
    Describe a merge, rebase or squash merge left in progress by an earlier invocation.

    Nothing is persisted between invocations, so only the git operation
    itself can be finished or undone; steps that would have followed it
    are not recovered.

    Returns:
        Conflict with abort/continue plans, or None if nothing is in progress
    """
    git = repo.git
    if git.is_rebase_in_progress():
        step: Step = ContinueRebaseStep()
        abort: Step = AbortRebaseStep()
        message = "A rebase is in progress"
    elif git.is_merge_in_progress():
        step = ContinueMergeStep()
        abort = AbortMergeStep()
        message = "A merge is in progress"
    elif git.is_squash_in_progress():
        step = CommitStep()
        abort = DiscardChangesStep()
        message = "A squash merge is in progress"
    else:
        return None
    return Conflict(
        step=step,
        message=message,
        abort_steps=StepList([abort]),
        continue_steps=StepList([step]),
    )
