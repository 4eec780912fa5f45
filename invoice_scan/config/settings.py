from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    record_store: str = "postgres"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "invoice_scan"
    db_username: str = "invoice_scan"
    db_password: str = "secret"
    db_pool_max_size: int = 10
    db_create_schema: bool = True

    server_host: str = "localhost"
    server_port: int = 3001
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:5173"]

    upload_path: str = "./uploads"
    public_base_url: str = "http://localhost:3001"
    max_upload_size_bytes: int = 10 * 1024 * 1024

    extraction_provider: str = "gemini"
    extraction_api_key: str = ""
    extraction_model_name: str = ""
    extraction_base_url: str = ""
    extraction_timeout_seconds: int = 90
    extraction_max_retries: int = 0
    extraction_temperature: float = 0.0

    shutdown_grace_seconds: float = 5.0
