"""
Per-invocation repository context.

Bundles the git worker, the loaded configuration and (when the remote is
on a supported code-hosting service) the hosting driver. Planners, steps
and the runner all receive this one object.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from branchwright.core.config import BranchwrightConfig, load_config
from branchwright.core.git import GitRepo

if TYPE_CHECKING:
    from branchwright.core.hosting.base import HostingDriver, LogCallback


@dataclass
class Repository:
    """The repository a command operates on."""

    git: GitRepo
    config: BranchwrightConfig
    driver: HostingDriver | None = None

    @classmethod
    def open(
        cls,
        project_dir: Path | None = None,
        *,
        log: LogCallback | None = None,
    ) -> Repository:
        """
        Open the repository in a directory and detect its hosting driver.

        Args:
            project_dir: Repository root (defaults to cwd)
            log: Callback receiving hosting API log messages

        Returns:
            Repository with git worker, config and optional driver
        """
        from branchwright.core.hosting import new_driver

        git = GitRepo(project_dir)
        config = load_config(git.project_dir)
        return cls(git=git, config=config, driver=new_driver(config, git, log))
