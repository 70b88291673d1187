"""FFmpeg argument construction for lossless cut and concat."""

from collections.abc import Iterable
from pathlib import Path


def format_seconds(value: float) -> str:
    """Seconds as FFmpeg accepts them, without float noise (2.0 -> "2", 1.25 -> "1.25")."""
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return text or "0"


def build_cut_args(
    source_path: str | Path,
    start_time: float,
    end_time: float,
    output_path: str | Path,
    include_audio: bool = True,
) -> list[str]:
    """Extract ``[start_time, end_time)`` from a source by stream copy.

    ``-avoid_negative_ts make_zero`` shifts timestamps so a cut starting
    mid-stream does not produce negative ones.
    """
    args = [
        "-y",
        "-ss",
        format_seconds(start_time),
        "-to",
        format_seconds(end_time),
        "-i",
        str(source_path),
        "-c",
        "copy",
    ]
    if not include_audio:
        args.append("-an")
    args.extend(["-avoid_negative_ts", "make_zero", str(output_path)])
    return args


def build_concat_args(list_path: str | Path, output_path: str | Path) -> list[str]:
    """Join the files named in a concat-demuxer list by stream copy."""
    return [
        "-y",
        "-f",
        "concat",
        "-safe",
        "0",
        "-i",
        str(list_path),
        "-c",
        "copy",
        str(output_path),
    ]


def render_concat_list(paths: Iterable[str | Path]) -> str:
    """Concat demuxer list: one ``file '<path>'`` line per input, in order."""
    lines = []
    for p in paths:
        escaped = str(p).replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    return "\n".join(lines) + "\n"
