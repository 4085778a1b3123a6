"""Application configuration via environment variables."""

import os
import tempfile

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Supabase (only when job_store_backend=supabase)
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    jobs_table: str = "tasks"
    processed_data_table: str = "processed_data"

    # Storage
    job_store_backend: str = "memory"  # "memory" or "supabase"
    upload_dir: str = os.path.join(tempfile.gettempdir(), "bulk_ingest_uploads")

    # Job processing
    chunk_size: int = 1000
    recovery_interval_seconds: float = 60.0
    default_mapping_format: str = "default"

    # Service
    service_port: int = 8002
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
