"""Configuration for conventional-release.

Two kinds of settings exist:

- RepositorySettings: which repository to talk to and how to authenticate.
  Always taken from the environment the GitHub Actions runner provides.
- ReleaseConfig: how versions are computed. Built from defaults, then the
  [tool.conventional-release] table of pyproject.toml, then action inputs /
  CLI options, each layer overriding the previous one.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from .commits import DEFAULT_RULE_SET, RULE_SETS
from .exceptions import ConfigError, MissingConfiguration
from .toml import get_tool_config, load_pyproject

DEFAULT_API_URL = "https://api.github.com"


class RepositorySettings(BaseModel):
    """Repository identity and credentials.

    Attributes:
        owner: Repository owner (user or organization).
        repo: Repository name.
        token: Token used for the REST API.
        api_url: REST API root, differs on GitHub Enterprise Server.
    """

    owner: str
    repo: str
    token: str
    api_url: str = DEFAULT_API_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RepositorySettings:
        """Read GITHUB_REPOSITORY, GITHUB_TOKEN and GITHUB_API_URL.

        Raises:
            MissingConfiguration: If the repository or token is unset, or the
                                  repository is not in "owner/repo" form.
        """
        env = os.environ if environ is None else environ

        repository = env.get("GITHUB_REPOSITORY")
        if not repository:
            raise MissingConfiguration("env var GITHUB_REPOSITORY not found")
        owner, sep, repo = repository.partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise MissingConfiguration(
                f"env var GITHUB_REPOSITORY contains invalid repository value: {repository!r}"
            )

        token = env.get("GITHUB_TOKEN")
        if not token:
            raise MissingConfiguration("env var GITHUB_TOKEN not found")

        return cls(
            owner=owner,
            repo=repo,
            token=token,
            api_url=env.get("GITHUB_API_URL") or DEFAULT_API_URL,
        )


class ReleaseConfig(BaseModel):
    """Settings that drive version computation.

    Attributes:
        init_version: Version used when no matching release exists yet.
        tag_prefix: Prefix of release tags (e.g. "v" for "v1.2.3").
        rules: Name of the commit classification rule set.
        strict_tags: Only consider tags that are exactly prefix + MAJOR.MINOR.PATCH.
        latest_shortcut: Try the "latest release" endpoint before listing
                         every release.
    """

    init_version: str = "0.0.0"
    tag_prefix: str = "v"
    rules: str = DEFAULT_RULE_SET
    strict_tags: bool = False
    latest_shortcut: bool = False

    @field_validator("rules")
    @classmethod
    def _known_rule_set(cls, value: str) -> str:
        if value not in RULE_SETS:
            raise ValueError(
                f"unknown rule set {value!r}, expected one of: {', '.join(sorted(RULE_SETS))}"
            )
        return value


def load_config(
    root: Path | None = None, overrides: Mapping[str, Any] | None = None
) -> ReleaseConfig:
    """Build the release configuration.

    Args:
        root: Directory holding pyproject.toml. Defaults to the current
              directory. A missing file is not an error.
        overrides: Values from action inputs or CLI options. None and empty
                   strings are treated as unset.

    Raises:
        ConfigError: If the merged values fail validation.
    """
    pyproject = (root or Path.cwd()) / "pyproject.toml"
    values: dict[str, Any] = {}
    if pyproject.is_file():
        values.update(get_tool_config(load_pyproject(pyproject)))

    for key, value in (overrides or {}).items():
        if value is None or value == "":
            continue
        values[key] = value

    try:
        return ReleaseConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def parse_multiline(value: str | None) -> list[str]:
    """Split a multi-line action input into its non-empty, stripped lines."""
    if not value:
        return []
    return [line.strip() for line in value.splitlines() if line.strip()]
