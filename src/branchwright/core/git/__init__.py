"""
Git access for branchwright.

Provides the git worker that runs single git subcommands and the parser
for remote URLs.
"""

from branchwright.core.git.repo import ConflictError, GitError, GitRepo
from branchwright.core.git.url import RemoteURL, parse_remote_url

__all__ = [
    "ConflictError",
    "GitError",
    "GitRepo",
    "RemoteURL",
    "parse_remote_url",
]
