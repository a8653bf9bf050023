"""Release and release asset models."""

from datetime import datetime

from pydantic import BaseModel, Field

ASSET_STATE_UPLOADED = "uploaded"


class ReleaseAsset(BaseModel):
    """A binary attached to a release."""

    id: int
    name: str
    size: int = Field(ge=0)
    state: str = ASSET_STATE_UPLOADED
    download_url: str | None = None

    @property
    def is_uploaded(self) -> bool:
        return self.state == ASSET_STATE_UPLOADED


class Release(BaseModel):
    """A published release and its assets."""

    id: int
    tag_name: str
    published_at: datetime | None = None
    assets: list[ReleaseAsset] = Field(default_factory=list)

    @property
    def eligible_assets(self) -> list[ReleaseAsset]:
        """Assets in the ``uploaded`` state; anything else is skipped."""
        return [asset for asset in self.assets if asset.is_uploaded]
