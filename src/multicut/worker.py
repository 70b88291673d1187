"""Export worker entry point: polls the exports directory and runs jobs."""

import logging
import signal
import sys
import threading

from multicut.config import Settings, get_settings
from multicut.pipeline.export import ExportPipeline
from multicut.pipeline.scheduler import ExportScheduler
from multicut.storage.job_store import FileJobStore, JobStore
from multicut.transcode.executor import TranscodeExecutor

logger = logging.getLogger(__name__)


def build_scheduler(settings: Settings, store: JobStore | None = None) -> ExportScheduler:
    """Wire store, executor, pipeline and scheduler from settings."""
    store = store or FileJobStore(settings.exports_dir)
    executor = TranscodeExecutor(
        binary=settings.ffmpeg_binary,
        tail_lines=settings.ffmpeg_stderr_tail_lines,
        timeout=settings.transcode_timeout_seconds,
    )
    pipeline = ExportPipeline(
        store,
        executor,
        media_base_path=settings.media_base_path,
        download_url_template=settings.download_url_template,
    )
    return ExportScheduler(store, pipeline, settings.poll_interval_seconds)


def main() -> int:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(f"Media path: {settings.media_base_path}")
    logger.info(f"Exports dir: {settings.exports_dir}")

    stop = threading.Event()

    def _request_stop(signum, _frame):
        logger.info(f"Received signal {signum}, stopping after the current job")
        stop.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    try:
        build_scheduler(settings).run(stop)
    except Exception:
        logger.exception("Fatal error in export worker")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
