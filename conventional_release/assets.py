"""Release asset discovery and upload."""

from __future__ import annotations

import glob
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from .console import debug, error, info
from .exceptions import GitHubError

if TYPE_CHECKING:
    from .github import GitHubClient
    from .models import Release, ReleaseAsset


def find_files(patterns: Iterable[str]) -> list[Path]:
    """Expand glob patterns into a list of regular files.

    Patterns are expanded in order and ``**`` matches recursively. Directories
    and duplicates are skipped.
    """
    files: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        matches = sorted(glob.glob(pattern, recursive=True))
        debug(f"release asset: using pattern: {pattern}, found files: {matches}")
        for match in matches:
            path = Path(match)
            if not path.is_file():
                debug(f"release asset: {match} is not a file, skip")
                continue
            if path not in seen:
                seen.add(path)
                files.append(path)
    return files


def upload_assets(
    client: GitHubClient, release: Release, files: Iterable[Path]
) -> list[ReleaseAsset]:
    """Upload files to a release one by one.

    Stops at the first failure. Assets uploaded before it stay on the release;
    they are listed in the log before the error is re-raised.
    """
    uploaded: list[ReleaseAsset] = []
    for path in files:
        debug(f"release asset: uploading asset: {path.name} from file: {path}")
        try:
            asset = client.upload_release_asset(release, path.name, path.read_bytes())
        except (GitHubError, OSError):
            names = ", ".join(a.name for a in uploaded) or "<none>"
            error(f"release asset: upload of {path} failed; uploaded so far: {names}")
            raise
        info(f"release asset: uploaded asset {asset.name}")
        uploaded.append(asset)
    return uploaded
