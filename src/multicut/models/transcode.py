"""Transcode result data models."""

from pydantic import BaseModel, Field


class TranscodeResult(BaseModel):
    """Result of one successful FFmpeg invocation."""

    args: list[str] = Field(default_factory=list, description="Arguments after the binary")
    returncode: int = Field(default=0)
    stderr_tail: str = Field(default="", description="Last diagnostic lines")
    elapsed_seconds: float = Field(default=0.0, ge=0)
