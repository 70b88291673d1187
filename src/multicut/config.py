"""Application configuration using Pydantic BaseSettings."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Multicut export configuration loaded from environment variables."""

    model_config = {"env_prefix": "MULTICUT_", "env_file": ".env", "extra": "ignore"}

    # Directories
    media_base_path: Path = Path("./data")
    exports_subdir: str = "exports"

    # Worker
    poll_interval_seconds: float = 3.0
    run_worker_in_api: bool = False

    # FFmpeg
    ffmpeg_binary: str = "ffmpeg"
    ffmpeg_stderr_tail_lines: int = 5
    transcode_timeout_seconds: float | None = None

    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    download_url_template: str = "/api/export/{job_id}/download"

    log_level: str = "INFO"

    @property
    def exports_dir(self) -> Path:
        return self.media_base_path / self.exports_subdir

    def resolve_media_path(self, path: str | Path) -> Path:
        """Resolve a descriptor file path; relative paths live under the media root."""
        return resolve_media_path(path, self.media_base_path)


def resolve_media_path(path: str | Path, base: Path) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    return base / p


def get_settings() -> Settings:
    """Return a settings instance built from the current environment."""
    return Settings()
