"""
Hosting data models for branchwright.

Defines the Pydantic models exchanged between the ship workflow and the
hosting drivers.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PullRequestInfo(BaseModel):
    """
    What a hosting driver knows about the pull request of a branch.

    ``can_merge_with_api`` is only true when exactly one open pull request
    goes from the branch into its parent and an API token is configured.
    """

    model_config = ConfigDict(frozen=True)

    can_merge_with_api: bool = Field(default=False, description="Whether ship can merge via the API")
    default_commit_message: str = Field(default="", description="Suggested squash commit message")
    pull_request_number: int | None = Field(default=None, description="Number of the pull request")


class MergePullRequestOptions(BaseModel):
    """
    Parameters for merging a pull request.

    The first line of ``commit_message`` becomes the squash-merge title,
    the remaining lines become the body.
    """

    model_config = ConfigDict(frozen=True)

    branch: str = Field(..., description="Branch being shipped")
    parent_branch: str = Field(..., description="Branch the pull request merges into")
    pull_request_number: int | None = Field(
        default=None, description="Pull request number, looked up when missing"
    )
    commit_message: str = Field(..., description="Squash commit message")


class PullRequest(BaseModel):
    """An open pull request matching a branch, as returned by a listing call."""

    number: int
    title: str = ""


def split_commit_message(message: str) -> tuple[str, str]:
    """
    Split a commit message into title and body.

    Example:
        >>> split_commit_message("title\\nline1\\nline2")
        ('title', 'line1\\nline2')
        >>> split_commit_message("title\\n\\nbody")
        ('title', 'body')
    """
    title, _, body = message.partition("\n")
    return title.strip(), body.lstrip("\n").rstrip()


def default_commit_message(pull_request: PullRequest) -> str:
    return f"{pull_request.title} (#{pull_request.number})"
