from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    record_store: str = "postgres"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "docextract"
    db_username: str = "docextract"
    db_password: str = "secret"
    db_pool_max_size: int = 10
    db_connect_timeout_seconds: int = 10

    blob_storage_root: str = "./uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    extraction_engine: str = "pdfplumber"
    extraction_max_workers: int = 4

    processing_timeout_seconds: int = 900
    sweep_interval_seconds: int = 60

    auth_secret_key: str = "change-me"
    auth_algorithm: str = "HS256"
    auth_token_ttl_seconds: int = 86400
