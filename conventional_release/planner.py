"""Next-version planning.

Combines the release selector output, the commit history and the classifier
into a VersionPlan. Nothing here talks to GitHub; the pipeline module fetches
the inputs and passes them in.

Commit ordering contract: commits are newest-first in commit order, as
returned by the GitHub "list commits" endpoint. Author dates follow that
order only loosely, since rebased and cherry-picked commits keep their
original author date. The order is therefore checked through the current
release's own commit: when listing starts at that commit's author date, it
is the last (oldest) entry and is dropped so it is not counted twice.
"""

from __future__ import annotations

from collections.abc import Sequence

from .commits import classify_messages, first_line, get_rules
from .config import ReleaseConfig
from .console import debug, warning
from .models import CommitRecord, Release, VersionPlan
from .versions import SemanticVersion


def warn_on_date_inversions(commits: Sequence[CommitRecord]) -> int:
    """Log every commit whose author date is newer than its predecessor's.

    Returns:
        The number of inversions found.
    """
    inversions = 0
    for newer, older in zip(commits, commits[1:]):
        if older.date > newer.date:
            inversions += 1
            warning(
                f"Commit {older.sha} ({older.date.isoformat()}) has a newer author date "
                f"than {newer.sha} ({newer.date.isoformat()}) listed before it"
            )
    return inversions


def drop_boundary_commit(
    commits: Sequence[CommitRecord], prior_commit_id: str | None
) -> list[CommitRecord]:
    """Remove the current release's own commit from the history.

    The commit is expected last in a newest-first list. Entries listed after
    it are older history that shares its author date, and are dropped with
    it. When the commit is not in the list at all (a truncated listing, for
    instance) every commit is kept. Without a prior release commit the
    history is returned unchanged.
    """
    retained = list(commits)
    if prior_commit_id is None or not retained:
        return retained

    shas = [c.sha for c in retained]
    if prior_commit_id not in shas:
        warning(
            f"Release commit {prior_commit_id} is not in the listed history; "
            f"keeping all {len(retained)} commits"
        )
        return retained

    index = shas.index(prior_commit_id)
    older = retained[index + 1 :]
    if older:
        warning(
            f"{len(older)} commit(s) listed after release commit {prior_commit_id} "
            f"are treated as already released: {', '.join(c.sha for c in older)}"
        )
    return retained[:index]


def plan_version(
    prior_release: Release | None,
    prior_commit_id: str | None,
    commits: Sequence[CommitRecord],
    config: ReleaseConfig,
) -> VersionPlan:
    """Compute the next version and changelog.

    Args:
        prior_release: Release the next version builds on, None on first release.
        prior_commit_id: Sha of the commit prior_release's tag points at.
        commits: History since that commit's author date, newest first.
        config: Initial version, tag prefix and rule set.

    Returns:
        The plan; ``released`` is False when no commit qualifies for a bump.

    Raises:
        InvalidVersionFormat: If the release tag or initial version is not a
                              valid MAJOR.MINOR.PATCH version.
    """
    previous = SemanticVersion.from_tag(
        prior_release.tag_name if prior_release else None,
        config.init_version,
        config.tag_prefix,
    )

    warn_on_date_inversions(commits)
    retained = drop_boundary_commit(commits, prior_commit_id)
    messages = [c.message for c in retained]
    debug(f"planner: {len(messages)} commit messages considered")

    severity = classify_messages(messages, get_rules(config.rules))
    debug(f"planner: highest change severity: {severity.name}")

    nxt = previous.bump(severity)
    return VersionPlan(
        previous_version=previous,
        next_version=nxt,
        tag=nxt.to_tag(config.tag_prefix),
        changelog=[first_line(m) for m in messages],
        released=nxt.bumped,
    )
