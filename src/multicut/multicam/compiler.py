"""Multicam-to-job compiler.

Turns a multi-angle clip (angles with sync offsets plus time-ordered switch
points) into the absolute cut instructions of an export job descriptor.
"""

import logging
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime

from multicut.models.job import JobDescriptor, Output, Segment, Source
from multicut.models.multicam import MediaAsset, MulticamAngle, MulticamClip, MulticamExportOptions

logger = logging.getLogger(__name__)


def build_sources(
    clip: MulticamClip,
    assets: dict[str, MediaAsset],
    media_base_path: str = "",
) -> list[Source]:
    """One source per angle, in angle order."""
    sources = []
    for angle in clip.angles:
        asset = assets.get(angle.media_id)
        sources.append(
            Source(
                id=angle.media_id,
                name=angle.name or (asset.name if asset else angle.media_id),
                file_path=_source_path(angle, asset, media_base_path),
                width=asset.width if asset else None,
                height=asset.height if asset else None,
                duration=asset.duration if asset else None,
                fps=asset.fps if asset else None,
                has_audio=True,
            )
        )
    return sources


def _source_path(angle: MulticamAngle, asset: MediaAsset | None, media_base_path: str) -> str:
    if asset and asset.file_path:
        return asset.file_path
    filename = (asset.name if asset and asset.name else None) or angle.media_id
    if media_base_path:
        return f"{media_base_path.rstrip('/')}/{filename}"
    return filename


def build_segments(clip: MulticamClip, include_audio: bool = True) -> list[Segment]:
    """Cut instructions for each stretch between consecutive switch points.

    The last switch point runs to the clip's duration. Bounds are shifted by
    the active angle's sync offset; stretches with no positive duration are
    dropped, as are switch points naming an unknown angle.
    """
    points = clip.sorted_switch_points()
    segments = []
    for i, sp in enumerate(points):
        source_index = clip.angle_index(sp.angle_id)
        if source_index is None:
            logger.warning(f"Switch point at {sp.time}s references unknown angle {sp.angle_id}")
            continue
        angle = clip.angles[source_index]

        start = sp.time
        end = points[i + 1].time if i + 1 < len(points) else clip.duration
        if end - start <= 0:
            continue

        start_time = start + angle.sync_offset
        end_time = end + angle.sync_offset
        if start_time < 0:
            # A negative offset can push the cut before the source begins.
            start_time = 0.0
            if end_time <= start_time:
                continue

        segments.append(
            Segment(
                source_index=source_index,
                start_time=start_time,
                end_time=end_time,
                audio_from_source=include_audio,
            )
        )
    return segments


def compile_multicam(
    clip: MulticamClip,
    assets: Iterable[MediaAsset] = (),
    options: MulticamExportOptions | None = None,
) -> JobDescriptor | None:
    """Build a pending export job for ``clip``, or None if nothing can be exported."""
    opts = options or MulticamExportOptions()
    if not clip.switch_points:
        return None

    segments = build_segments(clip, include_audio=opts.include_audio)
    if not segments:
        return None

    asset_map = {a.id: a for a in assets}
    job_id = f"export-{uuid.uuid4()}"

    return JobDescriptor(
        version=1,
        id=job_id,
        project_id=opts.project_id,
        project_name=opts.project_name,
        created_at=datetime.now(UTC),
        sources=build_sources(clip, asset_map, opts.media_base_path),
        segments=segments,
        output=Output(
            file_path=f"exports/{job_id}/output.{opts.format}",
            format=opts.format,
            width=opts.width,
            height=opts.height,
            fps=opts.fps,
            codec="copy",
            include_audio=opts.include_audio,
        ),
    )
