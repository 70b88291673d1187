"""Export job descriptor: the versioned contract between editor and pipeline."""

import re
from datetime import UTC, datetime
from typing import Literal

from pydantic import AwareDatetime, Field, field_validator, model_validator

from multicut.models.base import WireModel
from multicut.models.errors import SourceReferenceError
from multicut.models.status import JobStatus

DESCRIPTOR_VERSION = 1

# Job ids name the job directory, so they must be a single safe path component.
JOB_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"

# ISO-8601 UTC timestamp as the editor writes it, e.g. 2026-01-15T10:30:00.000Z
CREATED_AT_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")

MEDIA_TYPES = {"mp4": "video/mp4", "webm": "video/webm"}

OutputFormat = Literal["mp4", "webm"]
OutputCodec = Literal["copy", "h264", "h265"]


class Source(WireModel):
    """One input media file referenced by index from segments."""

    id: str
    name: str
    file_path: str = Field(..., min_length=1)
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    duration: float | None = Field(default=None, ge=0)
    fps: float | None = Field(default=None, gt=0)
    has_audio: bool = True


class Segment(WireModel):
    """One contiguous time range cut from a single source, in output order."""

    source_index: int = Field(..., ge=0)
    start_time: float = Field(..., ge=0, description="Cut start in source seconds")
    end_time: float = Field(..., ge=0, description="Cut end in source seconds")
    audio_from_source: bool = True

    @model_validator(mode="after")
    def validate_start_before_end(self) -> "Segment":
        if self.end_time <= self.start_time:
            raise ValueError(
                f"endTime ({self.end_time}) must be greater than startTime ({self.start_time})"
            )
        return self

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


class Output(WireModel):
    """Target file of the export."""

    file_path: str = Field(..., min_length=1)
    format: OutputFormat = "mp4"
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    fps: float | None = Field(default=None, gt=0)
    # Only "copy" is executed; re-encode codecs are reserved.
    codec: OutputCodec = "copy"
    include_audio: bool = True

    @property
    def extension(self) -> str:
        return self.format

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.format]


class JobDescriptor(WireModel):
    """The unit of work persisted as ``config.json`` in the job directory.

    ``sourceIndex`` is not resolved here: an out-of-range index
    is accepted at submission and fails the job when it is processed.
    """

    version: Literal[1]
    id: str = Field(..., pattern=JOB_ID_PATTERN)
    project_id: str
    project_name: str
    created_at: AwareDatetime
    sources: list[Source] = Field(..., min_length=1)
    segments: list[Segment] = Field(..., min_length=1)
    output: Output
    status: JobStatus = JobStatus.PENDING

    @field_validator("version", mode="before")
    @classmethod
    def validate_version_is_integer(cls, v):
        # Lax mode would coerce true and 1.0 to 1.
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError(f"Unsupported config version {v!r}, expected {DESCRIPTOR_VERSION}")
        return v

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_created_at_timestamp(cls, v):
        if isinstance(v, datetime):
            return v.astimezone(UTC) if v.tzinfo is not None else v
        if not isinstance(v, str) or not CREATED_AT_PATTERN.match(v):
            raise ValueError("createdAt must be an ISO-8601 UTC timestamp")
        return v

    def resolve_source(self, segment_index: int) -> Source:
        """Return the source a segment reads from."""
        segment = self.segments[segment_index]
        if segment.source_index >= len(self.sources):
            raise SourceReferenceError(
                f"Segment {segment_index} references invalid sourceIndex {segment.source_index}",
                details={
                    "segment": segment_index,
                    "source_index": segment.source_index,
                    "source_count": len(self.sources),
                },
            )
        return self.sources[segment.source_index]

    @property
    def total_duration(self) -> float:
        return sum(s.duration for s in self.segments)

    @property
    def download_filename(self) -> str:
        return f"{self.project_name}.{self.output.extension}"
