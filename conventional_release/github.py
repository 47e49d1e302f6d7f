"""GitHub REST API client.

A thin synchronous wrapper around httpx for the handful of endpoints the
release pipeline needs. Responses are validated into the models from
``models``; any failed request raises GitHubError.
"""

from __future__ import annotations

import re
from typing import Any

import httpx

from .config import RepositorySettings
from .console import debug
from .exceptions import GitHubError
from .models import CommitRecord, Release, ReleaseAsset, Tag

PER_PAGE = 100
MAX_PAGES = 10

_URI_TEMPLATE_RE = re.compile(r"\{[^}]*\}$")


class GitHubClient:
    """Client bound to a single repository.

    Args:
        settings: Repository identity and token.
        transport: Optional httpx transport, used by tests to stub responses.
        per_page: Page size for paginated listings.
        max_pages: Upper bound on pages fetched per listing.
    """

    def __init__(
        self,
        settings: RepositorySettings,
        *,
        transport: httpx.BaseTransport | None = None,
        per_page: int = PER_PAGE,
        max_pages: int = MAX_PAGES,
    ) -> None:
        self.owner = settings.owner
        self.repo = settings.repo
        self.per_page = per_page
        self.max_pages = max_pages

        debug(
            f"github: creating client owner: {self.owner}, repo: {self.repo}, "
            f"token: {'present' if settings.token else 'not present'}"
        )

        self._http = httpx.Client(
            base_url=f"{settings.api_url.rstrip('/')}/repos/{self.owner}/{self.repo}",
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {settings.token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=30,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GitHubError(f"{method} {url} failed: {e}") from e
        if response.is_error:
            raise GitHubError(
                f"{method} {url} failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response.json()

    def _paginate(self, url: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Fetch pages until a short page or max_pages is reached."""
        items: list[dict[str, Any]] = []
        for page in range(1, self.max_pages + 1):
            batch = self._request(
                "GET", url, params={**(params or {}), "page": page, "per_page": self.per_page}
            )
            debug(f"github: {url} page {page}: {len(batch)} items")
            items.extend(batch)
            if len(batch) < self.per_page:
                break
        return items

    def get_latest_release(self) -> Release | None:
        """Return the repository's latest release, or None if unavailable.

        Any API error (including 404 when there are no releases) is treated
        as "no release"; callers fall back to listing all releases.
        """
        debug("github: getting latest release")
        try:
            release = Release.model_validate(self._request("GET", "/releases/latest"))
        except GitHubError as e:
            debug(f"github: latest release unavailable: {e}")
            return None
        debug(f"github: found latest release tag: {release.tag_name}")
        return release

    def list_all_releases(self) -> list[Release]:
        """Return every release across pages, without duplicates."""
        releases: list[Release] = []
        seen: set[int] = set()
        for raw in self._paginate("/releases"):
            release = Release.model_validate(raw)
            if release.id not in seen:
                seen.add(release.id)
                releases.append(release)
        debug(f"github: found {len(releases)} releases")
        return releases

    def list_tags(self) -> list[Tag]:
        tags = [Tag.model_validate(t) for t in self._paginate("/tags")]
        debug(f"github: found {len(tags)} tags")
        return tags

    def get_commit(self, sha: str) -> CommitRecord:
        debug(f"github: getting commit sha: {sha}")
        return CommitRecord.model_validate(self._request("GET", f"/commits/{sha}"))

    def list_commits(self, since: str | None = None) -> list[CommitRecord]:
        """List commits on the default branch, newest first.

        Args:
            since: ISO 8601 timestamp; only commits at or after it are returned.
        """
        params = {"since": since} if since else None
        commits = [CommitRecord.model_validate(c) for c in self._paginate("/commits", params)]
        debug(f"github: found {len(commits)} commits since {since}")
        return commits

    def create_release(self, tag: str, body: str) -> Release:
        debug(f"github: creating release with tag: {tag}")
        data = self._request(
            "POST",
            "/releases",
            json={
                "tag_name": tag,
                "name": tag,
                "body": body,
                "draft": False,
                "prerelease": False,
            },
        )
        return Release.model_validate(data)

    def upload_release_asset(self, release: Release, name: str, data: bytes) -> ReleaseAsset:
        """Upload a file to a release.

        Uses the release's upload_url (hosted on uploads.github.com), falling
        back to the REST path on the API host when the release has none.
        """
        if release.upload_url:
            url = _URI_TEMPLATE_RE.sub("", release.upload_url)
        else:
            url = f"/releases/{release.id}/assets"
        payload = self._request(
            "POST",
            url,
            params={"name": name},
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return ReleaseAsset.model_validate(payload)
