from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "studyaid"
    db_username: str = "studyaid"
    db_password: str = "secret"

    job_worker_count: int = 3
    max_job_attempts: int = 3
    job_poll_interval_seconds: float = 1.0
    job_retry_backoff_seconds: float = 2.0
    job_shutdown_grace_seconds: float = 30.0
    job_store_max_terminal_records: int = 10000

    files_root: str = "/app/files"
    max_upload_size_bytes: int = 10 * 1024 * 1024
    pdf_engine: str = "pdfplumber"

    tesseract_lang: str = "eng"
    tesseract_cmd: str = ""

    transcription_provider: str = "openai"
    transcription_model_name: str = "whisper-1"
    ffmpeg_binary: str = "ffmpeg"
    video_frame_interval_seconds: int = 30
    video_max_frames: int = 10

    analysis_provider: str = "openai"
    analysis_api_key: str = ""
    analysis_model_name: str = "gpt-4o-mini"
    analysis_base_url: str = ""
    analysis_temperature: float = 0.3
    analysis_timeout_seconds: float = 60.0

    analysis_cache_ttl_seconds: int = 1800
    analysis_cache_max_entries: int = 1024
