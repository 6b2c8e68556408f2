"""
Application configuration management.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    
    # Airtable
    airtable_api_key: str = ""
    airtable_base_id: str = "appUNIsu8KgvOlmi0"
    airtable_table_name: str = "Failed Payments"
    airtable_api_url: str = "https://api.airtable.com/v0"
    http_timeout: float = 10.0
    
    # Mail relay
    gmail_email: str = ""
    gmail_password: str = ""
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    smtp_starttls: bool = False
    smtp_timeout: float = 10.0
    alert_recipient: Optional[str] = None  # Falls back to gmail_email if not set
    
    # Redis (idempotency ledger, disabled when unset)
    redis_url: Optional[str] = None
    dedupe_ttl_seconds: int = 7 * 24 * 3600
    
    # Application
    log_level: str = "INFO"
    log_buffer_capacity: int = 100
    
    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
