"""Multi-angle clip models used by the multicam editor and the job compiler."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import Field

from multicut.models.base import WireModel
from multicut.models.job import OutputFormat

SyncMethod = Literal["audio", "manual", "timecode"]


class MediaAsset(WireModel):
    """A media file known to the editor."""

    id: str = Field(..., min_length=1)
    name: str = ""
    file_path: str | None = None
    duration: float | None = Field(default=None, ge=0)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    fps: float | None = Field(default=None, gt=0)


class MulticamAngle(WireModel):
    """One camera feed within a multicam clip."""

    id: str = Field(..., min_length=1)
    name: str = ""
    media_id: str = Field(..., min_length=1)
    # Seconds added to clip time to get source time for this angle.
    sync_offset: float = 0.0
    track_id: str | None = None


class SwitchPoint(WireModel):
    """From ``time`` onward the clip shows ``angle_id``."""

    time: float = Field(..., ge=0)
    angle_id: str = Field(..., min_length=1)


class MulticamClip(WireModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    angles: list[MulticamAngle] = Field(default_factory=list)
    switch_points: list[SwitchPoint] = Field(default_factory=list)
    duration: float = Field(..., ge=0, description="Longest angle after sync offsets")
    sync_method: SyncMethod = "manual"
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def angle(self, angle_id: str) -> MulticamAngle | None:
        return next((a for a in self.angles if a.id == angle_id), None)

    def angle_index(self, angle_id: str) -> int | None:
        for i, a in enumerate(self.angles):
            if a.id == angle_id:
                return i
        return None

    def sorted_switch_points(self) -> list[SwitchPoint]:
        return sorted(self.switch_points, key=lambda sp: sp.time)


class MulticamExportOptions(WireModel):
    """Project-level settings applied when a multicam clip becomes a job."""

    project_id: str = ""
    project_name: str = "Untitled"
    format: OutputFormat = "mp4"
    include_audio: bool = True
    media_base_path: str = ""
    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)
    fps: float = Field(default=30.0, gt=0)


class MulticamExportRequest(WireModel):
    """Body of the multicam export endpoint."""

    clip: MulticamClip
    assets: list[MediaAsset] = Field(default_factory=list)
    options: MulticamExportOptions = Field(default_factory=MulticamExportOptions)
