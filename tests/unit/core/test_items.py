"""Tests for item and release models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from gitrieve.core.models.branch import BranchState, BranchStatus
from gitrieve.core.models.release import Release, ReleaseAsset


@pytest.mark.unit
class TestRelease:
    """Tests for Release and ReleaseAsset."""

    def test_eligible_assets_skip_incomplete_uploads(self):
        release = Release(
            id=1,
            tag_name="v1",
            published_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            assets=[
                ReleaseAsset(id=1, name="a.zip", size=10),
                ReleaseAsset(id=2, name="b.zip", size=10, state="starter"),
            ],
        )
        assert [asset.name for asset in release.eligible_assets] == ["a.zip"]

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            ReleaseAsset(id=1, name="a.zip", size=-1)


@pytest.mark.unit
class TestBranchState:
    """Tests for BranchState."""

    @pytest.mark.parametrize(
        "status,changed",
        [
            (BranchStatus.UP_TO_DATE, False),
            (BranchStatus.FAILED, False),
            (BranchStatus.CREATED, True),
            (BranchStatus.FAST_FORWARDED, True),
        ],
    )
    def test_changed(self, status, changed):
        state = BranchState(remote_ref="origin/main", local_name="main", existed=True, status=status)
        assert state.changed is changed
