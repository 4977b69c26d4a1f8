from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )
    
    # Database
    database_url: str
    
    # Auth / session cookie
    secret_key: str
    session_max_age_days: int = 30
    session_https_only: bool = False
    
    # Resume uploads (local disk storage)
    upload_dir: str = "uploads/resumes"
    upload_url_prefix: str = "/uploads/resumes"
    max_resume_size_mb: int = 5
    
    # App
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: str = ""  # comma-separated extra CORS origins


settings = Settings()
