"""Tests for conventional_release.pipeline."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from conventional_release.config import ReleaseConfig
from conventional_release.exceptions import GitHubError, InvalidVersionFormat
from conventional_release.models import CommitRecord, Release, ReleaseAsset, Tag
from conventional_release.pipeline import (
    compute_plan,
    find_latest_release,
    find_release_commit,
    publish_release,
    render_release_body,
    run_compute,
    run_publish,
)
from conventional_release.state import Handoff


@pytest.fixture
def client() -> MagicMock:
    return MagicMock()


class TestFindLatestRelease:
    def test_lists_all_releases(self, client: MagicMock, make_release) -> None:
        client.list_all_releases.return_value = [
            make_release("v1.0.0", day=0),
            make_release("v1.1.0", day=1),
        ]

        release = find_latest_release(client, "v")

        assert release.tag_name == "v1.1.0"
        client.get_latest_release.assert_not_called()

    def test_none_when_no_match(self, client: MagicMock, make_release) -> None:
        client.list_all_releases.return_value = [make_release("docs-1.0.0")]

        assert find_latest_release(client, "v") is None

    def test_shortcut_used_when_it_matches(self, client: MagicMock, make_release) -> None:
        client.get_latest_release.return_value = make_release("v3.0.0", day=9)

        release = find_latest_release(client, "v", shortcut=True)

        assert release.tag_name == "v3.0.0"
        client.list_all_releases.assert_not_called()

    def test_shortcut_falls_back_when_missing(self, client: MagicMock, make_release) -> None:
        client.get_latest_release.return_value = None
        client.list_all_releases.return_value = [make_release("v1.0.0")]

        assert find_latest_release(client, "v", shortcut=True).tag_name == "v1.0.0"

    def test_shortcut_skips_draft(self, client: MagicMock, make_release) -> None:
        client.get_latest_release.return_value = make_release("v9.9.9", day=9).model_copy(
            update={"draft": True}
        )
        client.list_all_releases.return_value = [make_release("v1.0.0")]

        assert find_latest_release(client, "v", shortcut=True).tag_name == "v1.0.0"

    def test_shortcut_falls_back_when_tag_policy_fails(
        self, client: MagicMock, make_release
    ) -> None:
        client.get_latest_release.return_value = make_release("v2.0.0-rc1", day=9)
        client.list_all_releases.return_value = [make_release("v1.0.0")]

        release = find_latest_release(client, "v", strict=True, shortcut=True)

        assert release.tag_name == "v1.0.0"

    def test_listing_errors_propagate(self, client: MagicMock) -> None:
        client.list_all_releases.side_effect = GitHubError("boom", status_code=502)

        with pytest.raises(GitHubError):
            find_latest_release(client, "v")


class TestFindReleaseCommit:
    def test_no_release(self, client: MagicMock) -> None:
        assert find_release_commit(client, None) is None
        client.list_tags.assert_not_called()

    def test_resolves_tag(self, client: MagicMock, make_release, make_commits) -> None:
        commit = make_commits("feat: x")[0]
        client.list_tags.return_value = [Tag(name="v0.9.0", sha="old"), Tag(name="v1.0.0", sha="sha1")]
        client.get_commit.return_value = commit

        assert find_release_commit(client, make_release("v1.0.0")) is commit
        client.get_commit.assert_called_once_with("sha1")

    def test_missing_tag(self, client: MagicMock, make_release) -> None:
        client.list_tags.return_value = [Tag(name="v0.9.0", sha="old")]

        assert find_release_commit(client, make_release("v1.0.0")) is None
        client.get_commit.assert_not_called()


class TestComputePlan:
    def test_first_release(self, client: MagicMock, make_commits) -> None:
        client.list_all_releases.return_value = []
        client.list_commits.return_value = make_commits("feat: a", "chore: init")

        plan = compute_plan(client, ReleaseConfig())

        client.list_commits.assert_called_once_with(None)
        assert plan.tag == "v0.1.0"
        assert plan.changelog == ["feat: a", "chore: init"]

    def test_since_release_commit(
        self, client: MagicMock, make_release, make_commits
    ) -> None:
        commits = make_commits("fix: a", "feat: b", "chore: c")
        boundary = commits[-1]
        client.list_all_releases.return_value = [make_release("v1.2.3")]
        client.list_tags.return_value = [Tag(name="v1.2.3", sha=boundary.sha)]
        client.get_commit.return_value = boundary
        client.list_commits.return_value = commits

        plan = compute_plan(client, ReleaseConfig())

        client.list_commits.assert_called_once_with(boundary.date.isoformat())
        assert plan.next_version.format() == "1.3.0"
        assert plan.released is True

    def test_invalid_init_version(self, client: MagicMock) -> None:
        client.list_all_releases.return_value = []
        client.list_commits.return_value = []

        with pytest.raises(InvalidVersionFormat):
            compute_plan(client, ReleaseConfig(init_version="1.0"))


class TestRunCompute:
    def test_writes_outputs_and_state(
        self, client: MagicMock, make_commits, tmp_path: Path
    ) -> None:
        client.list_all_releases.return_value = []
        client.list_commits.return_value = make_commits("fix: a")
        output = tmp_path / "out"
        state = tmp_path / "state"

        plan = run_compute(client, ReleaseConfig(), output_path=output, state_path=state)

        assert plan.tag == "v0.0.1"
        assert "tag=v0.0.1" in output.read_text().splitlines()
        assert "version-patch=1" in output.read_text().splitlines()
        assert 'changelog=["fix: a"]' in state.read_text().splitlines()

    def test_logs_no_new_version(
        self, client: MagicMock, capsys: pytest.CaptureFixture[str], tmp_path: Path
    ) -> None:
        client.list_all_releases.return_value = []
        client.list_commits.return_value = []

        plan = run_compute(
            client, ReleaseConfig(), output_path=tmp_path / "o", state_path=tmp_path / "s"
        )

        assert plan.released is False
        assert "no new version" in capsys.readouterr().out


class TestRenderReleaseBody:
    def test_bullets(self) -> None:
        assert render_release_body(["feat: a", "fix: b"]) == "**Changelog:**\n* feat: a\n* fix: b\n"

    def test_empty(self) -> None:
        assert render_release_body([]) == "**Changelog:**\n"


class TestPublishRelease:
    @pytest.fixture
    def handoff(self) -> Handoff:
        return Handoff(tag="v1.1.0", version="1.1.0", released=True, changelog=["feat: a"])

    def test_skips_when_not_released(self, client: MagicMock, handoff: Handoff) -> None:
        handoff = handoff.model_copy(update={"released": False})

        assert publish_release(client, handoff, ["dist/*"]) is None
        client.create_release.assert_not_called()

    def test_creates_release_without_assets(
        self, client: MagicMock, handoff: Handoff, make_release
    ) -> None:
        client.create_release.return_value = make_release("v1.1.0")

        release = publish_release(client, handoff)

        assert release.tag_name == "v1.1.0"
        client.create_release.assert_called_once_with("v1.1.0", "**Changelog:**\n* feat: a\n")
        client.upload_release_asset.assert_not_called()

    @patch("conventional_release.pipeline.upload_assets")
    @patch("conventional_release.pipeline.find_files")
    def test_uploads_assets(
        self,
        mock_find: MagicMock,
        mock_upload: MagicMock,
        client: MagicMock,
        handoff: Handoff,
        make_release,
    ) -> None:
        release = make_release("v1.1.0")
        client.create_release.return_value = release
        mock_find.return_value = [Path("dist/a.whl")]
        mock_upload.return_value = [ReleaseAsset(id=1, name="a.whl")]

        publish_release(client, handoff, ["dist/*.whl"])

        mock_find.assert_called_once_with(["dist/*.whl"])
        mock_upload.assert_called_once_with(client, release, [Path("dist/a.whl")])

    def test_create_failure_propagates(self, client: MagicMock, handoff: Handoff) -> None:
        client.create_release.side_effect = GitHubError("exists", status_code=422)

        with pytest.raises(GitHubError):
            publish_release(client, handoff, ["dist/*"])


def test_run_publish_reads_state(client: MagicMock) -> None:
    env = {
        "STATE_tag": "v2.0.0",
        "STATE_version": "2.0.0",
        "STATE_released": "true",
        "STATE_changelog": '["feat!: new api"]',
    }
    client.create_release.return_value = Release(
        id=3, tag_name="v2.0.0", created_at="2024-01-01T00:00:00Z"
    )

    release = run_publish(client, [], env)

    assert release.id == 3
    client.create_release.assert_called_once_with("v2.0.0", "**Changelog:**\n* feat!: new api\n")
