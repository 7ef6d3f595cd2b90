"""
Ordered lists of steps.

Plans are built forward-only: steps are appended one at a time or spliced
in from another list, and insertion order is execution order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from branchwright.core.steps.models import Step


@dataclass
class StepList:
    """
    An ordered sequence of steps, the unit of work handed to the runner.

    Example:
        >>> steps = StepList()
        >>> steps.append(CheckoutBranchStep(branch_name="feature"))
        >>> steps.append_list([MergeBranchStep(branch_name="main")])
        >>> len(steps)
        2
    """

    steps: list[Step] = field(default_factory=list)

    def append(self, step: Step) -> None:
        self.steps.append(step)

    def append_list(self, other: StepList | Iterable[Step]) -> None:
        """Append all steps of another list, preserving their order."""
        self.steps.extend(list(other))

    def is_empty(self) -> bool:
        return not self.steps

    def branch_names(self) -> set[str]:
        """Names of all branches the steps operate on."""
        names: set[str] = set()
        for step in self.steps:
            for attr in ("branch_name", "parent_branch"):
                if name := getattr(step, attr, None):
                    names.add(name)
        return names

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, index: int) -> Step:
        return self.steps[index]
