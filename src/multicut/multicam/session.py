"""Multicam editing state with explicit publish/subscribe notifications."""

import logging
import uuid
from collections.abc import Callable, Iterable

from multicut.models.errors import NotFoundError, ValidationError
from multicut.models.job import JobDescriptor
from multicut.models.multicam import (
    MediaAsset,
    MulticamAngle,
    MulticamClip,
    MulticamExportOptions,
    SwitchPoint,
    SyncMethod,
)
from multicut.multicam.compiler import compile_multicam

logger = logging.getLogger(__name__)

# Switch points closer than this are treated as the same point.
SWITCH_TOLERANCE = 0.001

Listener = Callable[[], None]


class MulticamSession:
    """Holds the multicam clips of one project.

    Every mutation notifies all current subscribers synchronously, in
    subscription order. ``subscribe`` returns a handle that unsubscribes.
    """

    def __init__(self, assets: Iterable[MediaAsset] = ()):
        self._clips: dict[str, MulticamClip] = {}
        self._assets: dict[str, MediaAsset] = {a.id: a for a in assets}
        self._listeners: list[Listener] = []

    # --- Publish/subscribe ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # --- Assets and clips ---

    def add_asset(self, asset: MediaAsset) -> None:
        self._assets[asset.id] = asset

    @property
    def assets(self) -> list[MediaAsset]:
        return list(self._assets.values())

    def get_clip(self, clip_id: str) -> MulticamClip:
        clip = self._clips.get(clip_id)
        if clip is None:
            raise NotFoundError(f"Multicam clip {clip_id} not found")
        return clip

    def clips(self) -> list[MulticamClip]:
        return list(self._clips.values())

    def load_clips(self, clips: Iterable[MulticamClip]) -> None:
        self._clips = {c.id: c for c in clips}
        self.notify()

    def create_clip(
        self, name: str, media_ids: list[str], sync_method: SyncMethod = "manual"
    ) -> MulticamClip:
        """One angle per media item; the first angle is live from time 0."""
        if not media_ids:
            raise ValidationError("A multicam clip needs at least one angle")

        angles = []
        for index, media_id in enumerate(media_ids):
            asset = self._assets.get(media_id)
            angles.append(
                MulticamAngle(
                    id=str(uuid.uuid4()),
                    name=asset.name if asset and asset.name else f"Angle {index + 1}",
                    media_id=media_id,
                )
            )

        clip = MulticamClip(
            id=str(uuid.uuid4()),
            name=name,
            angles=angles,
            switch_points=[SwitchPoint(time=0.0, angle_id=angles[0].id)],
            duration=max(self._asset_duration(m) for m in media_ids),
            sync_method=sync_method,
        )
        self._clips[clip.id] = clip
        logger.debug(f"Created multicam clip {clip.id} with {len(angles)} angle(s)")
        self.notify()
        return clip

    def delete_clip(self, clip_id: str) -> None:
        self.get_clip(clip_id)
        del self._clips[clip_id]
        self.notify()

    # --- Angles ---

    def add_angle(
        self, clip_id: str, media_id: str, name: str | None = None, sync_offset: float = 0.0
    ) -> MulticamAngle:
        clip = self.get_clip(clip_id)
        asset = self._assets.get(media_id)
        angle = MulticamAngle(
            id=str(uuid.uuid4()),
            name=name or (asset.name if asset and asset.name else f"Angle {len(clip.angles) + 1}"),
            media_id=media_id,
            sync_offset=sync_offset,
        )
        self._update(
            clip,
            angles=[*clip.angles, angle],
            duration=max(clip.duration, self._asset_duration(media_id) + sync_offset),
        )
        return angle

    def remove_angle(self, clip_id: str, angle_id: str) -> None:
        """Remove an angle; its switch points fall back to the first remaining angle."""
        clip = self.get_clip(clip_id)
        if len(clip.angles) <= 1:
            return
        remaining = [a for a in clip.angles if a.id != angle_id]
        if len(remaining) == len(clip.angles):
            return
        fallback = remaining[0].id
        switch_points = [
            SwitchPoint(time=sp.time, angle_id=fallback) if sp.angle_id == angle_id else sp
            for sp in clip.switch_points
        ]
        self._update(clip, angles=remaining, switch_points=switch_points)

    def set_sync_offset(self, clip_id: str, angle_id: str, sync_offset: float) -> None:
        clip = self.get_clip(clip_id)
        angles = [
            a.model_copy(update={"sync_offset": sync_offset}) if a.id == angle_id else a
            for a in clip.angles
        ]
        self._update(clip, angles=angles)

    # --- Switch points ---

    def add_switch_point(self, clip_id: str, time: float, angle_id: str) -> None:
        """Switch to ``angle_id`` at ``time``, replacing a point already at that time."""
        clip = self.get_clip(clip_id)
        if clip.angle(angle_id) is None:
            raise NotFoundError(f"Angle {angle_id} not found in clip {clip_id}")

        points = list(clip.switch_points)
        for i, sp in enumerate(points):
            if abs(sp.time - time) < SWITCH_TOLERANCE:
                points[i] = SwitchPoint(time=sp.time, angle_id=angle_id)
                break
        else:
            points.append(SwitchPoint(time=time, angle_id=angle_id))
            points.sort(key=lambda sp: sp.time)
        self._update(clip, switch_points=points)

    def remove_switch_point(self, clip_id: str, time: float) -> None:
        """Remove the point at ``time``; the last remaining point is kept."""
        clip = self.get_clip(clip_id)
        remaining = [sp for sp in clip.switch_points if abs(sp.time - time) >= SWITCH_TOLERANCE]
        if not remaining or len(remaining) == len(clip.switch_points):
            return
        self._update(clip, switch_points=remaining)

    def active_angle_at(self, clip_id: str, time: float) -> MulticamAngle | None:
        clip = self.get_clip(clip_id)
        points = clip.sorted_switch_points()
        if not points:
            return None
        active = points[0]
        for sp in points:
            if sp.time > time:
                break
            active = sp
        return clip.angle(active.angle_id)

    # --- Export ---

    def compile(
        self, clip_id: str, options: MulticamExportOptions | None = None
    ) -> JobDescriptor | None:
        return compile_multicam(self.get_clip(clip_id), self._assets.values(), options)

    def _asset_duration(self, media_id: str) -> float:
        asset = self._assets.get(media_id)
        return asset.duration if asset and asset.duration is not None else 0.0

    def _update(self, clip: MulticamClip, **updates) -> None:
        self._clips[clip.id] = clip.model_copy(update=updates)
        self.notify()
