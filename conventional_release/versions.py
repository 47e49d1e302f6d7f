"""Semantic version parsing and bumping.

Release tags look like ``{prefix}{major}.{minor}.{patch}``. Only plain
``MAJOR.MINOR.PATCH`` versions are accepted; pre-release and build metadata
are rejected rather than silently dropped.
"""

from __future__ import annotations

from enum import IntEnum

import semver
from pydantic import BaseModel, ConfigDict, NonNegativeInt

from .exceptions import InvalidVersionFormat


class ChangeSeverity(IntEnum):
    """How much a set of commits changes the public API.

    Ordered so that ``max()`` over several severities yields the bump to apply.
    """

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3


class SemanticVersion(BaseModel):
    """An immutable MAJOR.MINOR.PATCH version.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        bumped: True when this instance was produced by a bump, i.e. a new
                release is due.
    """

    model_config = ConfigDict(frozen=True)

    major: NonNegativeInt
    minor: NonNegativeInt
    patch: NonNegativeInt
    bumped: bool = False

    @classmethod
    def parse(cls, version_str: str) -> SemanticVersion:
        """Parse a bare version string such as "1.2.3".

        Raises:
            InvalidVersionFormat: If the string is not MAJOR.MINOR.PATCH.
        """
        try:
            parsed = semver.Version.parse(version_str)
        except (TypeError, ValueError) as e:
            raise InvalidVersionFormat(
                f"Invalid version {version_str!r}: expected MAJOR.MINOR.PATCH"
            ) from e
        if parsed.prerelease is not None or parsed.build is not None:
            raise InvalidVersionFormat(
                f"Invalid version {version_str!r}: pre-release and build "
                "metadata are not supported"
            )
        return cls(major=parsed.major, minor=parsed.minor, patch=parsed.patch)

    @classmethod
    def from_tag(
        cls, tag: str | None, init_version: str = "0.0.0", prefix: str = "v"
    ) -> SemanticVersion:
        """Parse a release tag, or the initial version when there is no tag.

        Examples:
            from_tag("v1.2.3") → 1.2.3
            from_tag("release-2.0.0", prefix="release-") → 2.0.0
            from_tag(None, init_version="0.1.0") → 0.1.0
        """
        if tag is None:
            return cls.parse(init_version)
        return cls.parse(tag.removeprefix(prefix))

    def bump(self, severity: ChangeSeverity) -> SemanticVersion:
        """Return the next version for the given severity.

        MAJOR resets minor and patch, MINOR resets patch. NONE returns the
        same numbers with ``bumped`` cleared.
        """
        current = semver.Version(self.major, self.minor, self.patch)
        if severity == ChangeSeverity.MAJOR:
            nxt = current.bump_major()
        elif severity == ChangeSeverity.MINOR:
            nxt = current.bump_minor()
        elif severity == ChangeSeverity.PATCH:
            nxt = current.bump_patch()
        else:
            return SemanticVersion(major=self.major, minor=self.minor, patch=self.patch)
        return SemanticVersion(
            major=nxt.major, minor=nxt.minor, patch=nxt.patch, bumped=True
        )

    def format(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_tag(self, prefix: str = "v") -> str:
        return f"{prefix}{self.format()}"

    def __str__(self) -> str:
        return self.format()
