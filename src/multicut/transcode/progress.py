"""FFmpeg progress monitoring.

FFmpeg reports progress on stderr with lines such as::

    frame=  120 fps= 30 q=-1.0 size=    1024kB time=00:00:04.00 bitrate=2097.2kbits/s speed=1.5x

The ``time=`` value compared to the expected output duration gives progress.
"""

import re
from collections.abc import Callable

TIME_PATTERN = re.compile(r"time=(\d+):(\d+):(\d+\.?\d*)")


def parse_timecode(line: str) -> float | None:
    """Return the ``time=`` position of an FFmpeg stderr line in seconds."""
    match = TIME_PATTERN.search(line)
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = float(match.group(3))
    return hours * 3600 + minutes * 60 + seconds


def parse_progress(line: str, total_duration: float) -> float | None:
    """Fraction of ``total_duration`` reached according to ``line``, or None."""
    current = parse_timecode(line)
    if current is None:
        return None
    if total_duration <= 0:
        return 0.0
    return min(1.0, current / total_duration)


class FFmpegProgressMonitor:
    """Monitor FFmpeg progress from stderr output.

    Reported values never go backwards, even if FFmpeg's clock does.
    """

    def __init__(self, total_duration: float, callback: Callable[[float], None] | None = None):
        self.total_duration = total_duration
        self.callback = callback
        self.current_time = 0.0

    def parse_line(self, line: str) -> float | None:
        """Parse an FFmpeg stderr line for time= progress."""
        current = parse_timecode(line)
        if current is None:
            return None
        self.current_time = max(self.current_time, current)
        progress = self.progress
        if self.callback:
            self.callback(progress)
        return progress

    @property
    def progress(self) -> float:
        """Current progress as fraction [0, 1]."""
        if self.total_duration <= 0:
            return 0.0
        return min(1.0, self.current_time / self.total_duration)
