"""Selection of the release the next version is computed from."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import Release

_VERSION_CORE = r"(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"


def matches_tag_policy(tag: str, prefix: str, *, strict: bool = False) -> bool:
    """Check whether a tag belongs to this release line.

    In loose mode any tag starting with the prefix qualifies. In strict mode
    the tag must be exactly the prefix followed by MAJOR.MINOR.PATCH, so
    "v2.0.0-rc1" or "v-nightly" are skipped.
    """
    if strict:
        return re.fullmatch(re.escape(prefix) + _VERSION_CORE, tag) is not None
    return tag.startswith(prefix)


def select_release(
    releases: Iterable[Release], prefix: str, *, strict: bool = False
) -> Release | None:
    """Pick the most recently created published release matching the tag policy.

    Drafts and releases whose tags do not match are ignored. Ties on
    created_at go to the release that comes last in the input.

    Returns:
        The selected release, or None if none matches.
    """
    candidates = [
        r
        for r in releases
        if not r.draft and matches_tag_policy(r.tag_name, prefix, strict=strict)
    ]
    if not candidates:
        return None
    return sorted(candidates, key=lambda r: r.created_at)[-1]
