"""
Branchwright - branch hierarchy automation for Git.

Keeps feature and perennial branches in sync with their parents and remotes.
Finished feature branches ship through the code-hosting service's
pull-request API, or as a local squash merge when no API is available.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
