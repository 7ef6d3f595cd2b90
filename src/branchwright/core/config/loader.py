"""
Reads branchwright settings from every place they can live.

Later layers win:
    built-in defaults < ~/.config/branchwright/config.json
        < <repo>/.branchwright.json < BRANCHWRIGHT_* and *_TOKEN env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import BranchwrightConfig

logger = logging.getLogger(__name__)

# One load per process; tests reset it with clear_cache()
_config_cache: BranchwrightConfig | None = None

TOKEN_ENV_VARS = {
    "GITHUB_TOKEN": "github_token",
    "GITLAB_TOKEN": "gitlab_token",
    "GITEA_TOKEN": "gitea_token",
    "BITBUCKET_TOKEN": "bitbucket_token",
}


def get_xdg_config_home() -> Path:
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """User-wide settings file under XDG_CONFIG_HOME."""
    return get_xdg_config_home() / "branchwright" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """Per-repository settings file. Callers pass the repository top level."""
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".branchwright.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Recursively overlay `override` onto a copy of `base`.

    Nested mappings such as ``hosting`` and ``lineage`` combine key by key
    instead of replacing each other wholesale.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 30}})
        {'a': 1, 'b': {'x': 10, 'y': 30}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Read a settings file.

    Returns None when the file is missing or doesn't hold a JSON object.
    Broken files are logged so users can see why their settings were ignored.
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def _parse_bool(value: str) -> bool:
    return value.lower() not in ("false", "0", "no", "")


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Layer environment variables over the merged file settings.

    Unknown values for enumerated settings are logged and skipped rather
    than failing the whole load.

    Variables:
        BRANCHWRIGHT_OFFLINE - overrides offline
        BRANCHWRIGHT_PULL_BRANCH_STRATEGY - overrides pull_branch_strategy
        BRANCHWRIGHT_HOSTING_SERVICE - overrides hosting.service
        GITHUB_TOKEN, GITLAB_TOKEN, GITEA_TOKEN, BITBUCKET_TOKEN - API tokens
    """
    result = config_dict.copy()
    hosting = dict(result.get("hosting") or {})

    if offline_str := os.environ.get("BRANCHWRIGHT_OFFLINE"):
        result["offline"] = _parse_bool(offline_str)

    if strategy := os.environ.get("BRANCHWRIGHT_PULL_BRANCH_STRATEGY"):
        if strategy in ("merge", "rebase"):
            result["pull_branch_strategy"] = strategy
        else:
            logger.warning(
                "Invalid BRANCHWRIGHT_PULL_BRANCH_STRATEGY value '%s', ignoring", strategy
            )

    if service := os.environ.get("BRANCHWRIGHT_HOSTING_SERVICE"):
        if service in ("github", "gitlab", "gitea", "bitbucket"):
            hosting["service"] = service
        else:
            logger.warning("Invalid BRANCHWRIGHT_HOSTING_SERVICE value '%s', ignoring", service)

    for env_var, key in TOKEN_ENV_VARS.items():
        if token := os.environ.get(env_var):
            hosting[key] = token

    result["hosting"] = hosting
    return result


def get_default_config() -> dict[str, Any]:
    return {
        "main_branch": "main",
        "perennial_branches": [],
        "lineage": {},
        "pull_branch_strategy": "merge",
        "offline": False,
        "sync_upstream": True,
        "hosting": {},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> BranchwrightConfig:
    """
    Build the effective configuration for a repository.

    Args:
        project_dir: Repository top level holding .branchwright.json (defaults to cwd)
        use_cache: Reuse the result of an earlier call in this process

    Raises:
        ValidationError: A layer set a value the models reject, for example
            an unknown pull_branch_strategy in the project file
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = BranchwrightConfig(**merged)

    _config_cache = config

    return config


def clear_cache() -> None:
    """Forget the cached configuration."""
    global _config_cache
    _config_cache = None
