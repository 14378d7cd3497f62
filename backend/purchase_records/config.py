from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Database
    database_url: str = "postgresql://localhost:5432/purchase_records"

    # Server
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "INFO"

    # Bill uploads
    upload_dir: str = "uploads"  # Local directory, created at startup if absent
    upload_url_prefix: str = "/uploads"  # Public path prefix for stored bills
    upload_field_name: str = "billUpload"
    max_upload_size_bytes: int = 30 * 1024 * 1024  # 30 MiB
    allowed_upload_types: str = "image/jpeg,image/jpg,image/png,image/gif"

    # Storage Configuration (S3-compatible, optional)
    # Bills are written to upload_dir unless both keys are set
    storage_endpoint_url: Optional[str] = None
    storage_access_key_id: Optional[str] = None
    storage_secret_access_key: Optional[str] = None
    storage_bucket_name: str = "purchase-bills"
    storage_region: str = "us-east-1"

    # Order numbering
    order_number_prefix: str = "BM"
    order_sequence_width: int = 4

    # CORS Configuration
    cors_origins: str = "http://localhost:5000"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


settings = Settings()
