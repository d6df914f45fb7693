"""httpedit core - config loading, environments, users and variable merging."""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values

logger = logging.getLogger(__name__)

GLOBAL_DIR = Path.home() / ".httpedit"
GLOBAL_CONFIG = GLOBAL_DIR / "config.yaml"

CWD_CONFIG_CANDIDATES = [
    ".httpedit.yaml",
    ".httpedit.yml",
    "httpedit.yaml",
    "httpedit.yml",
]

CONFIG_FILE_NAME = CWD_CONFIG_CANDIDATES[0]


def resolve_path(
    candidates: list[Path],
    default: Path | None = None,
) -> Path | None:
    """Return the first existing path from candidates, else default."""
    for p in candidates:
        if p.exists():
            return p.resolve()
    return default


def resolve_config_path(config_file: str | None) -> Path | None:
    """Find the config file to use.

    Resolution order:
      1. Explicit -c flag (hard, no fallthrough if missing)
      2. .httpedit.yaml (variants) in CWD
      3. ~/.httpedit/config.yaml
    """
    if config_file:
        return resolve_path([Path(config_file)])
    return resolve_path([Path(c) for c in CWD_CONFIG_CANDIDATES] + [GLOBAL_CONFIG])


def load_config(config_path: str | Path | None) -> dict:
    """Load YAML config file. Returns empty sections if not found.

    Stores '_config_dir' so relative paths (env_file) resolve against the
    config file's directory.
    """
    empty = {"defaults": {}, "environments": [], "users": [], "_config_dir": None}
    if config_path is None:
        return empty
    path = Path(config_path)
    if not path.exists():
        return empty
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level is not a mapping", path)
        return empty
    logger.debug("Loaded config from %s", path)
    return {
        "defaults": data.get("defaults") or {},
        "environments": data.get("environments") or [],
        "users": data.get("users") or [],
        "_config_dir": path.resolve().parent,
    }


def load_env(env_file: str | None, base_dir: str | Path | None = None) -> dict[str, str]:
    """Load .env file and merge with os.environ.

    .env values take precedence over os.environ.
    """
    env = dict(os.environ)
    if env_file:
        dotenv_path = Path(base_dir or ".") / env_file
        if dotenv_path.exists():
            dotenv_vars = dotenv_values(str(dotenv_path))
            env.update({k: v for k, v in dotenv_vars.items() if v is not None})
        else:
            logger.debug("env_file %s not found", dotenv_path)
    return env


def resolve_value(value: Any, env: dict[str, str]) -> Any:
    """Resolve $VAR and ${VAR} references in a string value.

    Unknown references are left as written. Non-strings pass through.
    """
    if not isinstance(value, str):
        return value

    def _replace(m: re.Match) -> str:
        var_name = m.group(1) or m.group(2)
        return env.get(var_name, os.environ.get(var_name, m.group(0)))

    return re.sub(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)", _replace, value)


def _find_named(entries: list, name: str | None) -> dict | None:
    if not name:
        return None
    for entry in entries:
        if isinstance(entry, dict) and entry.get("name") == name:
            return entry
    return None


def get_environment(config: dict, name: str | None) -> dict | None:
    return _find_named(config.get("environments", []), name)


def get_user(config: dict, name: str | None) -> dict | None:
    return _find_named(config.get("users", []), name)


def get_merged_variables(
    config: dict,
    environment: str | None = None,
    user: str | None = None,
    env: dict[str, str] | None = None,
) -> dict[str, str]:
    """Flat variable map for an environment and a user.

    Environment variables first, then the user's username/password/token,
    then the user's own variables. Falls back to defaults.environment and
    defaults.user when no name is given.
    """
    env = env if env is not None else dict(os.environ)
    defaults = config.get("defaults", {})
    variables: dict[str, str] = {}

    env_name = environment or defaults.get("environment")
    environment_entry = get_environment(config, env_name)
    if env_name and environment_entry is None:
        logger.warning("Environment '%s' not found in config", env_name)
    if environment_entry:
        variables.update(environment_entry.get("variables") or {})

    user_name = user or defaults.get("user")
    user_entry = get_user(config, user_name)
    if user_name and user_entry is None:
        logger.warning("User '%s' not found in config", user_name)
    if user_entry:
        for key in ("username", "password", "token"):
            if user_entry.get(key):
                variables[key] = user_entry[key]
        variables.update(user_entry.get("variables") or {})

    return {k: str(resolve_value(v, env)) for k, v in variables.items() if v is not None}


def generate_config() -> str:
    """Return example .httpedit.yaml content."""
    return """\
# httpedit configuration
# See: httpedit --help

defaults:
  timeout: 30
  # env_file: .env
  environment: local
  # user: admin
  verify_ssl: true

environments:
  - name: local
    variables:
      host: http://localhost:3000
      apiVersion: v1
  - name: staging
    variables:
      host: https://staging.example.com
      apiVersion: v1

users:
  - name: admin
    username: admin@example.com
    password: ${ADMIN_PASSWORD}
    variables:
      userId: "1"
      role: admin
"""
