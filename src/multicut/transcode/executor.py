"""Transcode executor: the only component that starts FFmpeg."""

import logging
import subprocess
import threading
import time
from collections import deque
from collections.abc import Callable, Sequence

from multicut.config import get_settings
from multicut.models.errors import TranscodeError
from multicut.models.transcode import TranscodeResult
from multicut.transcode.progress import FFmpegProgressMonitor

logger = logging.getLogger(__name__)


class TranscodeExecutor:
    """Runs one FFmpeg invocation at a time and resolves it to success or TranscodeError."""

    def __init__(
        self,
        binary: str | None = None,
        tail_lines: int | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.binary = binary or settings.ffmpeg_binary
        self.tail_lines = (
            tail_lines if tail_lines is not None else settings.ffmpeg_stderr_tail_lines
        )
        self.timeout = timeout if timeout is not None else settings.transcode_timeout_seconds

    def run(self, args: Sequence[str]) -> TranscodeResult:
        """Run to completion."""
        return self._execute(list(args), monitor=None)

    def run_with_progress(
        self,
        args: Sequence[str],
        duration: float,
        callback: Callable[[float], None],
    ) -> TranscodeResult:
        """Run to completion, reporting ``time=`` progress as a fraction of ``duration``."""
        return self._execute(list(args), monitor=FFmpegProgressMonitor(duration, callback))

    def _execute(self, args: list[str], monitor: FFmpegProgressMonitor | None) -> TranscodeResult:
        cmd = [self.binary, *args]
        logger.debug("ffmpeg %s", " ".join(args))
        started = time.monotonic()

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise TranscodeError(
                f"Failed to spawn FFmpeg: {e}",
                details={"command": self.binary},
            ) from e

        tail: deque[str] = deque(maxlen=self.tail_lines)
        timed_out = threading.Event()
        timer = None
        if self.timeout:

            def _kill_on_timeout() -> None:
                timed_out.set()
                process.kill()

            timer = threading.Timer(self.timeout, _kill_on_timeout)
            timer.daemon = True
            timer.start()

        try:
            # Text mode splits FFmpeg's carriage-return progress updates into lines.
            for line in process.stderr:
                line = line.rstrip()
                if not line:
                    continue
                tail.append(line)
                if monitor:
                    monitor.parse_line(line)
            process.wait()
        except BaseException:
            process.kill()
            process.wait()
            raise
        finally:
            if timer:
                timer.cancel()
            process.stderr.close()

        tail_text = "\n".join(tail)
        if timed_out.is_set():
            logger.error("FFmpeg killed after %ss timeout", self.timeout)
            raise TranscodeError(
                f"FFmpeg timed out after {self.timeout:g}s:\n{tail_text}",
                returncode=process.returncode,
                stderr_tail=tail_text,
            )
        if process.returncode != 0:
            logger.error("FFmpeg failed (code %d): %s", process.returncode, tail_text)
            raise TranscodeError(
                f"FFmpeg exited with code {process.returncode}:\n{tail_text}",
                returncode=process.returncode,
                stderr_tail=tail_text,
            )

        return TranscodeResult(
            args=args,
            returncode=process.returncode,
            stderr_tail=tail_text,
            elapsed_seconds=time.monotonic() - started,
        )
