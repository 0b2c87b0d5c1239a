"""Typed configuration loading.

The config file lists the tracked projects and the catalog settings:

    [github]
    api_url = "https://api.github.com"
    per_page = 100
    timeout = 30.0

    [resolve]
    policy = "contiguous"   # or "scan-all"

    [[projects]]
    name = "wadm"
    owner = "wasmCloud"
    repo = "wadm"
    version = "v0.12.2"
    fallback_tag = "v0.12.2"
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from patchwatch.releases.catalog import DEFAULT_API_URL, GITHUB_PER_PAGE
from patchwatch.releases.model import TrackedProject
from patchwatch.releases.resolver import ScanPolicy
from patchwatch.releases.semver import parse_tag

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_list, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "GitHubConfig",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_TIMEOUT",
    "default_config_path",
    "load_config",
]

CONFIG_ENV_VAR = "PATCHWATCH_CONFIG"
DEFAULT_CONFIG_FILE = "patchwatch.toml"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or is invalid."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Release catalog endpoint settings."""

    api_url: str = DEFAULT_API_URL
    per_page: int = GITHUB_PER_PAGE
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    projects: tuple[TrackedProject, ...] = ()
    github: GitHubConfig = field(default_factory=GitHubConfig)
    policy: ScanPolicy = ScanPolicy.CONTIGUOUS

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Result[Config, str]:
        """Create Config from parsed TOML; the error names the offending key."""
        github_result = _parse_github(get_table(data, "github") or {})
        if isinstance(github_result, Err):
            return github_result

        resolve: StrDict = get_table(data, "resolve") or {}
        policy_name = get_str(resolve, "policy") or ScanPolicy.CONTIGUOUS.value
        try:
            policy = ScanPolicy(policy_name)
        except ValueError:
            choices = ", ".join(p.value for p in ScanPolicy)
            return Err(f"resolve.policy: unknown policy {policy_name!r} (expected one of {choices})")

        raw_projects = get_list(data, "projects")
        if raw_projects is None:
            if "projects" in data:
                return Err("projects: expected an array of tables ([[projects]])")
            raw_projects = []

        projects: list[TrackedProject] = []
        for index, raw in enumerate(raw_projects):
            match _parse_project(raw, index):
                case Ok(project):
                    projects.append(project)
                case Err(message):
                    return Err(message)

        names = [p.name for p in projects]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            return Err(f"projects: duplicate name(s): {', '.join(duplicates)}")

        return Ok(cls(projects=tuple(projects), github=github_result.value, policy=policy))


def _parse_github(github: StrDict) -> Result[GitHubConfig, str]:
    per_page = get_int(github, "per_page")
    if per_page is None:
        per_page = GITHUB_PER_PAGE
    if not 1 <= per_page <= GITHUB_PER_PAGE:
        return Err(f"github.per_page: must be between 1 and {GITHUB_PER_PAGE}, got {per_page}")

    timeout = get_float(github, "timeout")
    if timeout is None:
        timeout = DEFAULT_TIMEOUT
    if timeout <= 0:
        return Err(f"github.timeout: must be positive, got {timeout}")

    return Ok(
        GitHubConfig(
            api_url=get_str(github, "api_url") or DEFAULT_API_URL,
            per_page=per_page,
            timeout=timeout,
        )
    )


def _parse_project(raw: object, index: int) -> Result[TrackedProject, str]:
    key = f"projects[{index}]"
    table = as_str_dict(raw)
    if table is None:
        return Err(f"{key}: expected a table")

    owner = get_str(table, "owner")
    repo = get_str(table, "repo")
    if owner is None or repo is None:
        return Err(f"{key}: 'owner' and 'repo' are required")

    version_text = get_str(table, "version")
    if version_text is None:
        return Err(f"{key}: 'version' is required")
    current = parse_tag(version_text)
    if current is None:
        return Err(f"{key}.version: {version_text!r} is not a semantic version")

    return Ok(
        TrackedProject(
            name=get_str(table, "name") or repo,
            owner=owner,
            repo=repo,
            current=current,
            fallback_tag=get_str(table, "fallback_tag"),
        )
    )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling I/O and syntax errors."""
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError("Config file not found", path=path))
    except PermissionError:
        return Err(ConfigError("Permission denied reading config", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def default_config_path() -> Path:
    """``$PATCHWATCH_CONFIG`` if set, else ``patchwatch.toml`` in the cwd."""
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_FILE


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration from a TOML file.

    Args:
        path: Path to the config file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    config = Config.from_dict(parsed.value)
    if isinstance(config, Err):
        return Err(ConfigError(config.error, path=path))
    return config
