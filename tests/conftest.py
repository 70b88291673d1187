"""Shared test fixtures and a fake FFmpeg executor."""

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from multicut.config import Settings
from multicut.models.errors import TranscodeError
from multicut.models.job import JobDescriptor
from multicut.models.status import StatusRecord
from multicut.models.transcode import TranscodeResult
from multicut.storage.job_store import FileJobStore


class FakeExecutor:
    """Stands in for FFmpeg: cuts write a marker file, concat joins the listed files."""

    def __init__(self, fail_on_call: int | None = None, stderr: str = "Invalid data found"):
        self.calls: list[list[str]] = []
        self.fail_on_call = fail_on_call
        self.stderr = stderr
        self.before_call: Callable[[int, list[str]], None] | None = None

    def run(self, args: Sequence[str]) -> TranscodeResult:
        return self.run_with_progress(args, 0.0, lambda _: None)

    def run_with_progress(
        self, args: Sequence[str], duration: float, callback: Callable[[float], None]
    ) -> TranscodeResult:
        args = list(args)
        index = len(self.calls)
        self.calls.append(args)
        if self.before_call:
            self.before_call(index, args)
        if self.fail_on_call == index:
            raise TranscodeError(
                f"FFmpeg exited with code 1:\n{self.stderr}", returncode=1, stderr_tail=self.stderr
            )

        callback(0.5)
        output = Path(args[-1])
        if "concat" in args:
            list_path = Path(args[args.index("-i") + 1])
            data = b""
            for line in list_path.read_text().splitlines():
                data += Path(line[len("file '") : -1]).read_bytes()
            output.write_bytes(data)
        else:
            source = args[args.index("-i") + 1]
            start = args[args.index("-ss") + 1]
            end = args[args.index("-to") + 1]
            output.write_bytes(f"[{Path(source).name}:{start}-{end}]".encode())
        callback(1.0)
        return TranscodeResult(args=args)

    @property
    def cut_calls(self) -> list[list[str]]:
        return [c for c in self.calls if "concat" not in c]


class RecordingJobStore(FileJobStore):
    """FileJobStore that remembers every status record written."""

    def __init__(self, root: Path):
        super().__init__(root)
        self.history: list[StatusRecord] = []

    def put_status(self, record: StatusRecord) -> None:
        super().put_status(record)
        self.history.append(record)


@pytest.fixture
def media_root(tmp_path):
    root = tmp_path / "media"
    (root / "sources").mkdir(parents=True)
    return root


@pytest.fixture
def settings(media_root):
    return Settings(media_base_path=media_root, poll_interval_seconds=0.05)


@pytest.fixture
def store(settings):
    s = RecordingJobStore(settings.exports_dir)
    s.ensure_root()
    return s


@pytest.fixture
def source_files(media_root):
    """Two small fake media files under the media root."""
    paths = []
    for name in ("cam_a.mp4", "cam_b.mp4"):
        p = media_root / "sources" / name
        p.write_bytes(b"fake video " + name.encode())
        paths.append(p)
    return paths


@pytest.fixture
def fake_executor():
    return FakeExecutor()


def make_config(
    job_id: str = "export-test-1",
    sources: list[Path | str] | None = None,
    segments: list[dict] | None = None,
    output_path: str | None = None,
    **overrides,
) -> dict:
    """Build a wire-format (camelCase) job descriptor payload."""
    sources = sources or ["sources/cam_a.mp4", "sources/cam_b.mp4"]
    config = {
        "version": 1,
        "id": job_id,
        "projectId": "proj-1",
        "projectName": "My Project",
        "createdAt": "2026-01-15T10:30:00Z",
        "sources": [
            {"id": f"media-{i}", "name": Path(str(p)).name, "filePath": str(p)}
            for i, p in enumerate(sources)
        ],
        "segments": segments
        or [
            {"sourceIndex": 0, "startTime": 0, "endTime": 2},
            {"sourceIndex": 1, "startTime": 2, "endTime": 5},
            {"sourceIndex": 0, "startTime": 5, "endTime": 8},
        ],
        "output": {"filePath": output_path or f"exports/{job_id}/output.mp4"},
    }
    config.update(overrides)
    return config


@pytest.fixture
def config_payload():
    return make_config()


@pytest.fixture
def descriptor(config_payload):
    return JobDescriptor.from_payload(config_payload)
