"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from conventional_release.config import RepositorySettings
from conventional_release.models import CommitRecord, Release

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_release() -> Callable[..., Release]:
    """Factory for releases; ``day`` offsets created_at from BASE_TIME."""

    def _make(tag: str, day: int = 0, release_id: int | None = None) -> Release:
        return Release(
            id=release_id if release_id is not None else day + 1,
            tag_name=tag,
            created_at=BASE_TIME + timedelta(days=day),
        )

    return _make


@pytest.fixture
def make_commits() -> Callable[..., list[CommitRecord]]:
    """Factory for a newest-first commit list from messages (newest first)."""

    def _make(*messages: str) -> list[CommitRecord]:
        count = len(messages)
        return [
            CommitRecord(
                sha=f"sha{count - i}",
                message=message,
                date=BASE_TIME + timedelta(hours=count - i),
            )
            for i, message in enumerate(messages)
        ]

    return _make


@pytest.fixture
def settings() -> RepositorySettings:
    return RepositorySettings(owner="octo", repo="widgets", token="t0ken")
