"""
Application configuration using pydantic-settings with nested structure
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from typing import Optional


# ============================================================================
# NESTED CONFIGURATION MODELS
# ============================================================================

# Get absolute path to .env file (backend directory)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BASE_DIR / ".env"


class ProviderConfig(BaseSettings):
    """Market data provider endpoint configuration."""
    base_url: str = "https://mini-finapi.vercel.app/api"
    ticker_path: str = "/ticker"
    symbols_param: str = "symbols"
    timeout_seconds: float = 10.0  # 0 disables the timeout
    model_config = SettingsConfigDict(env_prefix="PROVIDER__", extra="ignore")


class TickerConfig(BaseSettings):
    """Live ticker strip configuration."""
    enabled: bool = True
    poll_interval_seconds: float = 60.0
    model_config = SettingsConfigDict(env_prefix="TICKER__", extra="ignore")


class LoggerConfig(BaseSettings):
    """Logger configuration settings."""
    default_level: str = "INFO"
    file_path: str = "./data/logs/finterm.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    filter_enabled: bool = True
    filter_max_history: int = 5
    filter_time_threshold_seconds: float = 1.0
    model_config = SettingsConfigDict(env_prefix="LOGGER__", extra="ignore")


# ============================================================================
# MAIN SETTINGS CLASS
# ============================================================================

class Settings(BaseSettings):
    """Application settings loaded from environment variables.
    
    Configuration is organized into nested sections. Use double underscore
    (__) in env vars to reach a nested field.
    
    Example:
        LOGGER__DEFAULT_LEVEL=DEBUG
        PROVIDER__BASE_URL=http://localhost:3000/api
        TICKER__POLL_INTERVAL_SECONDS=30
    """
    
    # Application metadata
    APP_NAME: str = "FinTerm"
    APP_VERSION: str = "1.0.0"
    
    # Nested configuration sections (constructed after environment is loaded)
    PROVIDER: Optional[ProviderConfig] = None
    TICKER: Optional[TickerConfig] = None
    LOGGER: Optional[LoggerConfig] = None
    
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.PROVIDER = ProviderConfig()
        self.TICKER = TickerConfig()
        self.LOGGER = LoggerConfig()
    
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        env_nested_delimiter="__",
        env_prefix=""
    )


# Global settings instance
from dotenv import load_dotenv

# Load .env file into environment variables
if _ENV_FILE.exists():
    load_dotenv(str(_ENV_FILE), override=True)

settings = Settings()
