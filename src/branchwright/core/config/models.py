"""
Configuration data models for branchwright.

These models define the structure of .branchwright.json and
~/.config/branchwright/config.json files, with validation and type safety
via Pydantic.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

HostingServiceName = Literal["github", "gitlab", "gitea", "bitbucket"]


class HostingConfig(BaseModel):
    """
    Code-hosting service settings.

    The service is normally detected from the origin remote; these settings
    override detection for self-hosted installations and hold API tokens.
    """
    service: Optional[HostingServiceName] = Field(
        default=None,
        description="Hosting service to use instead of auto-detection"
    )
    origin_hostname: Optional[str] = Field(
        default=None,
        description="Hostname to use instead of the one in the origin URL"
    )
    github_token: Optional[str] = Field(default=None, description="GitHub API token")
    gitlab_token: Optional[str] = Field(default=None, description="GitLab API token")
    gitea_token: Optional[str] = Field(default=None, description="Gitea API token")
    bitbucket_token: Optional[str] = Field(default=None, description="Bitbucket API token")

    @field_validator("origin_hostname")
    @classmethod
    def empty_hostname_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class BranchwrightConfig(BaseModel):
    """
    Complete branchwright configuration.

    Merged from defaults, user config, project config, and environment
    variables. Besides the raw settings it answers the questions the sync
    planner and the hosting drivers ask about branches.

    Example:
        >>> config = BranchwrightConfig(lineage={"feature": "main"})
        >>> config.is_feature_branch("feature")
        True
        >>> config.parent_branch("feature")
        'main'
    """
    model_config = ConfigDict(extra="ignore")

    main_branch: str = Field(
        default="main",
        min_length=1,
        description="Name of the main branch"
    )
    perennial_branches: list[str] = Field(
        default_factory=list,
        description="Long-lived branches other than main (e.g. develop, staging)"
    )
    lineage: dict[str, str] = Field(
        default_factory=dict,
        description="Parent branch of each feature branch"
    )
    pull_branch_strategy: Literal["merge", "rebase"] = Field(
        default="merge",
        description="How perennial branches absorb their tracking branch"
    )
    offline: bool = Field(
        default=False,
        description="Skip all network operations (fetch, push)"
    )
    sync_upstream: bool = Field(
        default=True,
        description="Rebase the main branch onto upstream/<main> when an upstream remote exists"
    )
    hosting: HostingConfig = Field(default_factory=HostingConfig)

    def is_perennial_branch(self, branch: str) -> bool:
        return branch == self.main_branch or branch in self.perennial_branches

    def is_feature_branch(self, branch: str) -> bool:
        """Feature branches are all branches that aren't main or perennial."""
        return not self.is_perennial_branch(branch)

    def parent_branch(self, branch: str) -> str:
        """Configured parent of a branch, defaulting to the main branch."""
        return self.lineage.get(branch, self.main_branch)

    def ancestor_branches(self, branch: str) -> list[str]:
        """
        Lineage of a branch, oldest ancestor first.

        Args:
            branch: Branch to look up

        Returns:
            Ancestors from the root perennial branch down to the direct parent
        """
        ancestors: list[str] = []
        current = branch
        while self.is_feature_branch(current):
            parent = self.parent_branch(current)
            if parent in ancestors or parent == branch:
                break
            ancestors.insert(0, parent)
            current = parent
        return ancestors

    def is_offline(self) -> bool:
        return self.offline

    def should_sync_upstream(self) -> bool:
        return self.sync_upstream

    def hosting_service(self) -> Optional[str]:
        return self.hosting.service

    def origin_override(self) -> Optional[str]:
        return self.hosting.origin_hostname
