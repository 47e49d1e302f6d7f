"""CLI entry point for conventional-release.

Both commands are meant to run inside GitHub Actions: ``compute`` as the main
step and ``publish`` as the post step. Action inputs arrive as INPUT_*
environment variables; every input can also be passed as an option.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click

from .commits import RULE_SETS
from .config import RepositorySettings, load_config, parse_multiline
from .console import fatal
from .exceptions import ReleaseError
from .github import GitHubClient
from .pipeline import run_compute, run_publish


@contextmanager
def _fail_on_release_error() -> Iterator[None]:
    try:
        yield
    except ReleaseError as e:
        fatal(str(e))


@click.group()
@click.version_option(package_name="conventional-release")
def cli() -> None:
    """Semantic versioning and GitHub releases from conventional commits."""


@cli.command()
@click.option(
    "--init-version",
    envvar="INPUT_INIT-VERSION",
    help="Version used when no release exists yet. [default: 0.0.0]",
)
@click.option(
    "--tag-prefix",
    envvar="INPUT_TAG-PREFIX",
    help="Prefix of release tags. [default: v]",
)
@click.option(
    "--rules",
    envvar="INPUT_RULES",
    type=click.Choice(sorted(RULE_SETS)),
    help="Commit classification rule set. [default: standard]",
)
@click.option(
    "--strict-tags",
    envvar="INPUT_STRICT-TAGS",
    type=click.BOOL,
    help="Only consider tags of the form PREFIX + MAJOR.MINOR.PATCH.",
)
@click.option(
    "--latest-shortcut",
    envvar="INPUT_LATEST-SHORTCUT",
    type=click.BOOL,
    help="Try the latest-release endpoint before listing all releases.",
)
@click.option(
    "--github-output",
    envvar="GITHUB_OUTPUT",
    type=click.Path(dir_okay=False),
    help="Step output file. Outputs are printed when unset.",
)
@click.option(
    "--github-state",
    envvar="GITHUB_STATE",
    type=click.Path(dir_okay=False),
    help="Action state file read back by the publish step.",
)
def compute(
    init_version: str | None,
    tag_prefix: str | None,
    rules: str | None,
    strict_tags: bool | None,
    latest_shortcut: bool | None,
    github_output: str | None,
    github_state: str | None,
) -> None:
    """Compute the next version from commits since the last release."""
    with _fail_on_release_error():
        config = load_config(
            overrides={
                "init_version": init_version,
                "tag_prefix": tag_prefix,
                "rules": rules,
                "strict_tags": strict_tags,
                "latest_shortcut": latest_shortcut,
            }
        )
        settings = RepositorySettings.from_env()
        with GitHubClient(settings) as client:
            run_compute(
                client, config, output_path=github_output, state_path=github_state
            )


@cli.command()
@click.option(
    "--assets",
    envvar="INPUT_ASSETS",
    default="",
    help="Newline-separated glob patterns of files to attach.",
)
def publish(assets: str) -> None:
    """Create the release computed by the compute step and upload assets."""
    with _fail_on_release_error():
        settings = RepositorySettings.from_env()
        with GitHubClient(settings) as client:
            run_publish(client, parse_multiline(assets))
