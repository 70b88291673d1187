"""Data models for the multicut export pipeline."""

from multicut.models.base import WireModel
from multicut.models.errors import (
    ConflictError,
    ErrorResponse,
    JobCancelledError,
    MulticutError,
    NotFoundError,
    PreconditionError,
    ProcessingError,
    SourceReferenceError,
    TranscodeError,
    ValidationError,
)
from multicut.models.job import JobDescriptor, Output, Segment, Source
from multicut.models.multicam import (
    MediaAsset,
    MulticamAngle,
    MulticamClip,
    MulticamExportOptions,
    MulticamExportRequest,
    SwitchPoint,
)
from multicut.models.status import JobStatus, StatusRecord

__all__ = [
    "ConflictError",
    "ErrorResponse",
    "JobCancelledError",
    "JobDescriptor",
    "JobStatus",
    "MediaAsset",
    "MulticamAngle",
    "MulticamClip",
    "MulticamExportOptions",
    "MulticamExportRequest",
    "MulticutError",
    "NotFoundError",
    "Output",
    "PreconditionError",
    "ProcessingError",
    "Segment",
    "Source",
    "SourceReferenceError",
    "StatusRecord",
    "SwitchPoint",
    "TranscodeError",
    "ValidationError",
    "WireModel",
]
