"""Release pipeline: compute → publish.

This module wires the GitHub client to the planner:

Compute phase
1. Find the current release (most recent one matching the tag policy)
2. Resolve its tag to a commit and take that commit's author date
3. List commits since that date
4. Plan the next version and changelog
5. Write step outputs and the handoff for the publish phase

Publish phase
1. Read the handoff
2. Skip when nothing was bumped
3. Create the release with the changelog as body
4. Upload asset files
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from .assets import find_files, upload_assets
from .config import ReleaseConfig
from .console import debug, info, step
from .github import GitHubClient
from .models import CommitRecord, Release, VersionPlan
from .planner import plan_version
from .releases import matches_tag_policy, select_release
from .state import Handoff, load_handoff, save_state, write_outputs


def find_latest_release(
    client: GitHubClient, prefix: str, *, strict: bool = False, shortcut: bool = False
) -> Release | None:
    """Find the release the next version builds on.

    With ``shortcut`` the "latest release" endpoint is tried first and its
    answer is used when it satisfies the tag policy. Otherwise, or when the
    shortcut gives nothing usable, all releases are listed.
    """
    step("Finding current release")

    if shortcut:
        latest = client.get_latest_release()
        if (
            latest is not None
            and not latest.draft
            and matches_tag_policy(latest.tag_name, prefix, strict=strict)
        ):
            info(f"latest release: {latest.tag_name}")
            return latest
        debug("main: latest release shortcut unusable, listing all releases")

    releases = client.list_all_releases()
    release = select_release(releases, prefix, strict=strict)
    if release is None:
        info(f"no release found with tag prefix {prefix!r}")
    else:
        info(f"latest release: {release.tag_name}, created at: {release.created_at.isoformat()}")
    return release


def find_release_commit(client: GitHubClient, release: Release | None) -> CommitRecord | None:
    """Resolve a release's tag to the commit it points at.

    Returns:
        The commit, or None when there is no release or its tag is missing.
    """
    if release is None:
        return None

    tag = next((t for t in client.list_tags() if t.name == release.tag_name), None)
    if tag is None:
        info(f"tag {release.tag_name} not found, considering full history")
        return None

    commit = client.get_commit(tag.sha)
    debug(f"main: release commit sha: {commit.sha}, date: {commit.date.isoformat()}")
    return commit


def compute_plan(client: GitHubClient, config: ReleaseConfig) -> VersionPlan:
    """Fetch releases and history, then plan the next version."""
    release = find_latest_release(
        client,
        config.tag_prefix,
        strict=config.strict_tags,
        shortcut=config.latest_shortcut,
    )
    commit = find_release_commit(client, release)

    step("Collecting commits")
    since = commit.date.isoformat() if commit else None
    commits = client.list_commits(since)
    info(f"{len(commits)} commits since {since or 'the beginning'}")

    return plan_version(release, commit.sha if commit else None, commits, config)


def run_compute(
    client: GitHubClient,
    config: ReleaseConfig,
    *,
    output_path: str | Path | None = None,
    state_path: str | Path | None = None,
) -> VersionPlan:
    """Run the compute phase and persist its result."""
    debug(f"main: input initVersion: {config.init_version}")
    debug(f"main: input tagPrefix: {config.tag_prefix}")

    plan = compute_plan(client, config)

    step("Version")
    info(f"last version: {plan.previous_version}, "
         f"tag: {plan.previous_version.to_tag(config.tag_prefix)}")
    if plan.released:
        info(f"new version: {plan.next_version}, tag: {plan.tag}")
    else:
        info("no new version")

    write_outputs(output_path, plan, config.tag_prefix)
    save_state(state_path, plan)
    return plan


def render_release_body(changelog: Iterable[str]) -> str:
    """Render the release body, one bullet per commit subject."""
    return "**Changelog:**\n" + "".join(f"* {line}\n" for line in changelog)


def publish_release(
    client: GitHubClient, handoff: Handoff, asset_patterns: Iterable[str] = ()
) -> Release | None:
    """Create the release and upload its assets.

    Returns:
        The created release, or None when the compute phase found no bump.
    """
    if not handoff.released:
        info("release: skip, no new version")
        return None

    step(f"Creating release {handoff.tag}")
    info(f"release: creating for version: {handoff.version}, tag: {handoff.tag}")
    release = client.create_release(handoff.tag, render_release_body(handoff.changelog))
    info(f"release: created id: {release.id}")

    patterns = list(asset_patterns)
    if patterns:
        step("Uploading assets")
        files = find_files(patterns)
        info(f"release asset: found {len(files)} to upload")
        assets = upload_assets(client, release, files)
        info(f"release asset: uploaded {len(assets)} assets")

    return release


def run_publish(
    client: GitHubClient,
    asset_patterns: Iterable[str] = (),
    environ: Mapping[str, str] | None = None,
) -> Release | None:
    """Run the publish phase from the state saved by the compute phase."""
    return publish_release(client, load_handoff(environ), asset_patterns)
