"""Data models for conventional-release.

These Pydantic models represent the GitHub entities the pipeline reads and
the plan it hands from the compute phase to the publish phase. The GitHub
models accept the raw REST payloads directly; nested fields are reached
through alias paths.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, AliasPath, BaseModel, Field, model_validator

from .versions import SemanticVersion


class Release(BaseModel):
    """A GitHub release.

    Attributes:
        id: Numeric release id, used for asset uploads.
        tag_name: Tag the release points at (e.g. "v1.2.3").
        created_at: Creation time, used to pick the most recent release.
        upload_url: URI template for asset uploads, as returned by the API.
        draft: Unpublished release; its tag may not exist yet.
    """

    id: int
    tag_name: str
    created_at: datetime
    upload_url: str = ""
    draft: bool = False


class Tag(BaseModel):
    """A git tag and the commit it points at."""

    name: str
    sha: str = Field(validation_alias=AliasChoices("sha", AliasPath("commit", "sha")))


class CommitRecord(BaseModel):
    """A commit as seen by the planner.

    Attributes:
        sha: Commit id.
        message: Full commit message, possibly multi-line.
        date: Author timestamp.
    """

    sha: str
    message: str = Field(
        validation_alias=AliasChoices("message", AliasPath("commit", "message"))
    )
    date: datetime = Field(
        validation_alias=AliasChoices("date", AliasPath("commit", "author", "date"))
    )


class ReleaseAsset(BaseModel):
    id: int
    name: str


class VersionPlan(BaseModel):
    """Result of the compute phase.

    Attributes:
        previous_version: Version of the current release (or the initial
                          version when there is none).
        next_version: Version to release; equal to previous_version when
                      nothing qualifies for a bump.
        tag: Tag for next_version, including the prefix.
        changelog: Subject line of every commit considered, newest first.
        released: Whether a new release is due. Always next_version.bumped.
    """

    previous_version: SemanticVersion
    next_version: SemanticVersion
    tag: str
    changelog: list[str] = Field(default_factory=list)
    released: bool

    @model_validator(mode="after")
    def _released_matches_bump(self) -> VersionPlan:
        if self.released != self.next_version.bumped:
            raise ValueError("released must equal next_version.bumped")
        return self
