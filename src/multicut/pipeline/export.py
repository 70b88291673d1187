"""Export pipeline: cut each segment, concatenate, clean up, report status."""

import logging
from pathlib import Path

from multicut.config import get_settings, resolve_media_path
from multicut.models.errors import JobCancelledError, MulticutError, ProcessingError
from multicut.models.job import JobDescriptor
from multicut.models.status import JobStatus, StatusRecord
from multicut.storage.job_store import JobStore
from multicut.transcode.commands import build_concat_args, build_cut_args, render_concat_list
from multicut.transcode.executor import TranscodeExecutor

logger = logging.getLogger(__name__)

CONCAT_LIST_FILE = "concat_list.txt"

# Cutting uses [0, 0.8); concatenation starts at 0.85 and stays below 1.0
# until the job is marked completed.
CUT_PROGRESS_BUDGET = 0.8
CONCAT_PROGRESS_START = 0.85
CONCAT_PROGRESS_END = 0.95
MIN_PROGRESS_STEP = 0.01


class _StatusWriter:
    """Writes processing status for one job and remembers the last progress written."""

    def __init__(self, store: JobStore, job_id: str):
        self.store = store
        self.job_id = job_id
        self.progress = 0.0
        self.message = ""

    def update(self, progress: float, message: str) -> None:
        # Phase boundaries are computed separately from ticks; never step back.
        self.progress = max(self.progress, min(1.0, max(0.0, progress)))
        self.message = message
        self.store.put_status(
            StatusRecord(
                job_id=self.job_id,
                status=JobStatus.PROCESSING,
                progress=self.progress,
                message=message,
            )
        )

    def tick(self, progress: float) -> None:
        """Record intra-phase progress, skipping steps smaller than 1%."""
        if progress >= self.progress + MIN_PROGRESS_STEP:
            self.update(progress, self.message)


class ExportPipeline:
    """Runs one export job end to end through the transcode executor.

    States: processing (cutting segment i, then concatenating), completed,
    failed. A failed job is terminal; nothing is retried.
    """

    def __init__(
        self,
        store: JobStore,
        executor: TranscodeExecutor | None = None,
        media_base_path: Path | None = None,
        download_url_template: str | None = None,
    ):
        settings = get_settings()
        self.store = store
        self.executor = executor or TranscodeExecutor()
        self.media_base_path = Path(media_base_path or settings.media_base_path)
        self.download_url_template = download_url_template or settings.download_url_template

    def process(self, job_id: str) -> StatusRecord | None:
        """Load a job's descriptor and run it."""
        descriptor = self.store.get_descriptor(job_id)
        if descriptor is None:
            raise ProcessingError(f"Job {job_id} has no readable descriptor")
        return self.process_descriptor(descriptor)

    def process_descriptor(self, descriptor: JobDescriptor) -> StatusRecord | None:
        """Run the cut/concat pipeline for ``descriptor``.

        Returns the terminal status record, or None if the job was cancelled
        (its directory removed) while it ran.
        """
        job_id = descriptor.id
        workdir = self.store.workspace(job_id)
        segment_files: list[Path] = []
        concat_list = workdir / CONCAT_LIST_FILE
        writer = _StatusWriter(self.store, job_id)

        try:
            writer.update(0.0, "Starting export")
            self._mirror_status(descriptor, JobStatus.PROCESSING)
            logger.info(f"Processing job {job_id}: {descriptor.project_name}")

            # Step 1: cut segments
            total = len(descriptor.segments)
            for i, segment in enumerate(descriptor.segments):
                self._check_cancelled(job_id)
                source = descriptor.resolve_source(i)

                base = i / total * CUT_PROGRESS_BUDGET
                span = CUT_PROGRESS_BUDGET / total
                writer.update(base, f"Cutting segment {i + 1} of {total}")

                segment_file = (workdir / f"segment_{i}.{descriptor.output.extension}").resolve()
                segment_files.append(segment_file)

                args = build_cut_args(
                    self._resolve(source.file_path),
                    segment.start_time,
                    segment.end_time,
                    segment_file,
                    include_audio=segment.audio_from_source,
                )
                self.executor.run_with_progress(
                    args,
                    segment.duration,
                    lambda frac, base=base, span=span: writer.tick(base + frac * span),
                )

            # Step 2: concat list
            self._check_cancelled(job_id)
            concat_list.write_text(render_concat_list(segment_files), encoding="utf-8")
            writer.update(CONCAT_PROGRESS_START, "Concatenating segments")

            # Step 3: concatenate
            output_path = self._resolve(descriptor.output.file_path)
            # An output inside the job directory must not recreate it after a cancel.
            if not output_path.parent.is_relative_to(workdir.resolve()):
                output_path.parent.mkdir(parents=True, exist_ok=True)
            self._check_cancelled(job_id)
            concat_span = CONCAT_PROGRESS_END - CONCAT_PROGRESS_START
            self.executor.run_with_progress(
                build_concat_args(concat_list, output_path),
                descriptor.total_duration,
                lambda frac: writer.tick(CONCAT_PROGRESS_START + frac * concat_span),
            )

            # Step 4: cleanup
            self._cleanup(segment_files, concat_list)

            record = StatusRecord(
                job_id=job_id,
                status=JobStatus.COMPLETED,
                progress=1.0,
                message="Export completed",
                download_url=self.download_url_template.format(job_id=job_id),
            )
            self.store.put_status(record)
            self._mirror_status(descriptor, JobStatus.COMPLETED)
            logger.info(f"Job {job_id} completed: {output_path}")
            return record

        except JobCancelledError as e:
            logger.warning(f"Job {job_id} stopped: {e.message}")
            self._cleanup(segment_files, concat_list)
            return None
        except Exception as e:
            self._cleanup(segment_files, concat_list)
            return self._fail(descriptor, e)

    def _fail(self, descriptor: JobDescriptor, exc: Exception) -> StatusRecord | None:
        job_id = descriptor.id
        message = exc.message if isinstance(exc, MulticutError) else str(exc)
        message = message or type(exc).__name__
        logger.error(f"Job {job_id} failed: {message}")

        record = StatusRecord(job_id=job_id, status=JobStatus.FAILED, progress=0.0, error=message)
        try:
            self.store.put_status(record)
            self._mirror_status(descriptor, JobStatus.FAILED)
        except OSError:
            if self.store.exists(job_id):
                raise
            logger.warning(f"Job {job_id} was cancelled while processing; failure not recorded")
            return None
        return record

    def _mirror_status(self, descriptor: JobDescriptor, status: JobStatus) -> None:
        """Keep the descriptor's denormalized status in step with the status record."""
        self.store.put_descriptor(descriptor.model_copy(update={"status": status}))

    def _check_cancelled(self, job_id: str) -> None:
        if not self.store.exists(job_id):
            raise JobCancelledError(f"Job {job_id} was cancelled")

    def _resolve(self, path: str) -> Path:
        return resolve_media_path(path, self.media_base_path).resolve()

    def _cleanup(self, segment_files: list[Path], concat_list: Path) -> None:
        """Best-effort removal of intermediate files; never fails the job."""
        for f in [*segment_files, concat_list]:
            try:
                f.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {f}: {e}")
