"""Application configuration settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Application
    APP_NAME: str = "MediCore HMS"
    API_V1_PREFIX: str = "/api/v1"
    PORT: int = 8000
    
    # CORS - frontends allowed to call the portal API
    BACKEND_CORS_ORIGINS: str = '["http://localhost:3000", "http://localhost:5173"]'
    
    # Local key-value store (one JSON file per collection)
    STORE_DIR: str = ".medicore"
    SEED_DEMO_DATA: bool = True
    
    # Remote store - mirrored best-effort, change streams drive reloads
    SYNC_ENABLED: bool = False
    MONGODB_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "medicore"
    WATCHED_TABLES: str = '["profiles", "appointments", "resources"]'
    
    # OpenAI (optional - assistant falls back to canned text)
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    
    # Logging
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )
    
    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from JSON string."""
        try:
            return json.loads(self.BACKEND_CORS_ORIGINS)
        except json.JSONDecodeError:
            return ["http://localhost:3000"]
    
    @property
    def watched_tables(self) -> List[str]:
        """Parse the change-feed table list from JSON string."""
        try:
            return json.loads(self.WATCHED_TABLES)
        except json.JSONDecodeError:
            return ["profiles", "appointments", "resources"]


settings = Settings()
