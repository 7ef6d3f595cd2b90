"""Environment file loading.

API tokens usually live in ``.env`` files rather than in the JSON config.
Variables already exported in the shell always win:

  os.environ (pre-existing) > project .env > user .env
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values


def read_env_file(path: Path) -> dict[str, str]:
    """Read a .env file into a dict, skipping keys without a value."""
    if not path.exists():
        return {}
    return {str(k): str(v) for k, v in dotenv_values(path).items() if k and v is not None}


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> None:
    """Load user and project .env files into os.environ.

    Args:
        project_dir: base directory for project env paths (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths
    """
    if project_dir is None:
        project_dir = Path.cwd()

    if user_env_paths is None:
        xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
        user_env_paths = [xdg_home / "branchwright" / ".env"]

    if project_env_paths is None:
        project_env_paths = [project_dir / ".env"]

    preexisting = set(os.environ)

    # Later files override earlier ones, but never the shell environment.
    for path in [*user_env_paths, *project_env_paths]:
        for key, value in read_env_file(Path(path)).items():
            if key not in preexisting:
                os.environ[key] = value
