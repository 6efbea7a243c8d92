from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "Roster Approvals"
    debug: bool = False
    
    # CORS
    cors_origins: str = "http://localhost:3000"
    
    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
    
    # Database
    database_url: str = "sqlite:///./roster.db"
    
    # Security
    secret_key: str = "dev-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12
    
    # Logging
    log_level: str = "INFO"
    log_dir: str = "./logs"
    log_to_file: bool = False
    
    # Scheduled duration checks
    cron_secret: Optional[str] = None
    default_max_onsite_days: int = 14
    default_max_offsite_days: int = 14
    duration_warning_days: int = 3
    
    # Seeding
    admin_email: str = "admin@example.com"
    admin_password: str = "password123"
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ROSTER_",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
