"""Hypothesis strategies for property-based testing."""

from hypothesis import strategies as st

from multicut.models.job import JobDescriptor
from multicut.models.multicam import MulticamAngle, MulticamClip, SwitchPoint


@st.composite
def generate_descriptor(draw):
    """Generate a random valid JobDescriptor, leaving optional fields to their defaults."""
    n_sources = draw(st.integers(min_value=1, max_value=4))
    sources = [
        {"id": f"media-{i}", "name": f"cam_{i}.mp4", "filePath": f"sources/cam_{i}.mp4"}
        for i in range(n_sources)
    ]
    for source in sources:
        if draw(st.booleans()):
            source["duration"] = round(draw(st.floats(min_value=0.1, max_value=3600.0)), 3)
        if draw(st.booleans()):
            source["hasAudio"] = draw(st.booleans())

    n_segments = draw(st.integers(min_value=1, max_value=8))
    segments = []
    for _ in range(n_segments):
        start = round(draw(st.floats(min_value=0.0, max_value=600.0)), 3)
        length = round(draw(st.floats(min_value=0.01, max_value=60.0)), 3)
        segment = {
            "sourceIndex": draw(st.integers(min_value=0, max_value=n_sources - 1)),
            "startTime": start,
            "endTime": start + length,
        }
        if draw(st.booleans()):
            segment["audioFromSource"] = draw(st.booleans())
        segments.append(segment)

    job_id = draw(st.from_regex(r"\A[A-Za-z0-9][A-Za-z0-9_-]{0,20}\Z"))
    output = {
        "filePath": f"exports/{job_id}/output.mp4",
        "format": draw(st.sampled_from(["mp4", "webm"])),
    }
    return JobDescriptor.from_payload(
        {
            "version": 1,
            "id": job_id,
            "projectId": "proj",
            "projectName": draw(st.text(min_size=1, max_size=20)),
            "createdAt": "2026-03-01T12:00:00Z",
            "sources": sources,
            "segments": segments,
            "output": output,
        }
    )


@st.composite
def generate_multicam_clip(draw):
    """Generate a multicam clip with a few angles and arbitrary switch points."""
    n_angles = draw(st.integers(min_value=1, max_value=4))
    angles = [
        MulticamAngle(
            id=f"angle-{i}",
            name=f"Angle {i + 1}",
            media_id=f"media-{i}",
            sync_offset=round(draw(st.floats(min_value=-5.0, max_value=5.0)), 3),
        )
        for i in range(n_angles)
    ]
    angle_ids = [a.id for a in angles] + ["angle-missing"]
    duration = round(draw(st.floats(min_value=0.0, max_value=120.0)), 3)
    points = draw(
        st.lists(
            st.builds(
                SwitchPoint,
                time=st.floats(min_value=0.0, max_value=130.0).map(lambda t: round(t, 3)),
                angle_id=st.sampled_from(angle_ids),
            ),
            max_size=10,
        )
    )
    return MulticamClip(
        id="clip", name="Clip", angles=angles, switch_points=points, duration=duration
    )
