"""Dependency injection providers for FastAPI."""

from fastapi import Request

from multicut.config import Settings, get_settings
from multicut.storage.job_store import FileJobStore, JobStore


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_job_store(request: Request) -> JobStore:
    store = getattr(request.app.state, "job_store", None)
    if store is None:
        store = FileJobStore(get_app_settings(request).exports_dir)
    return store
