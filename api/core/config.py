"""
Configuration settings for the FastAPI application
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Reno Visualizer API"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = True

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000"
    ]

    # OpenAI (narrative wastage reports)
    openai_api_key: str = ""
    openai_model: str = "gpt-4"
    openai_max_tokens: int = 2000
    openai_temperature: float = 0.3
    openai_timeout: float = 60.0
    openai_max_retries: int = 2

    # Tile calculator
    default_wastage_percent: float = 10.0
    fallback_tile_unit_cost: float = 5.0  # per tile, when the product has no price
    default_tile_size_in: float = 12.0  # assumed tile side when dimensions are missing

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env


# Global settings instance
settings = Settings()
