# core/config.py
"""
Configuration management for the field diagnosis backend
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from typing import Annotated, List, Optional, Dict, Any
import json
import os
import logging
from functools import lru_cache
from enum import Enum
from dotenv import load_dotenv
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CLASSIFIER_MODELS = ["gemini-2.5-flash", "gemini-2.0-flash", "gemini-1.5-flash"]

class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

class Settings(BaseSettings):
    """Application settings with validation"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True

    # API Configuration
    api_title: str = "FieldScan Diagnosis Backend"
    api_version: str = "1.0.0"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:4173"
    ]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # Classifier
    gemini_api_key: Optional[str] = None
    classifier_models: Annotated[List[str], NoDecode] = list(DEFAULT_CLASSIFIER_MODELS)
    classifier_temperature: float = 0.3
    max_image_mb: int = 5

    # Cache Configuration
    cache_enabled: bool = True
    cache_default_ttl: int = 900  # 15 minutes
    cache_max_size: int = 256

    # Task/plan store
    store_path: str = "./data/store.json"

    # Agent Configurations
    diagnosis_config: Dict[str, Any] = {
        "quick_plan_area": "0.1 acres",
        "default_observation": "weed",
    }

    soil_config: Dict[str, Any] = {
        "max_soil_data_chars": 8000,
    }

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # The Gemini SDKs also honour GOOGLE_API_KEY
        if not self.gemini_api_key:
            self.gemini_api_key = os.getenv('GOOGLE_API_KEY') or None

    @field_validator("classifier_models", mode="before")
    @classmethod
    def _split_models(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                value = json.loads(value)
            else:
                value = value.split(",")
        return [m.strip() for m in value if m and m.strip()]

    def get_agent_config(self, agent_name: str) -> Dict[str, Any]:
        """Get configuration for specific agent"""
        config_map = {
            "diagnosis": self.diagnosis_config,
            "soil": self.soil_config
        }
        return config_map.get(agent_name, {})

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

# Validation functions
def validate_api_keys(settings: Settings) -> None:
    """Validate required API keys based on environment"""
    required_keys = []

    logger.info(f"GEMINI_API_KEY: {'Set' if settings.gemini_api_key else 'NOT SET'}")

    if not settings.gemini_api_key:
        required_keys.append("GEMINI_API_KEY")

    if required_keys and settings.is_production:
        raise ValueError(f"Missing required API keys in production: {', '.join(required_keys)}")

    if required_keys:
        logger.warning(f"Missing API keys: {', '.join(required_keys)}")
        logger.warning("Classification requests will fail until the key is configured")
    else:
        logger.info("All required API keys are present")
