"""
Centralized Configuration for InterviewIQ

This module provides one configuration object for the whole service. Values
come from defaults, an optional YAML or JSON config file, and environment
variables (a local ``.env`` file is loaded first), in increasing priority.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, validator

logger = logging.getLogger(__name__)

TIMEOUT_ANSWER_TEXT = "No answer provided (time limit exceeded)"
ANSWER_MATCH_POLICIES = ("exact", "contains", "keywords")


class StorageConfig(BaseModel):
    """Key-value store configuration"""
    backend: str = "file"
    data_dir: str = "local_data"
    database_url: str = "sqlite:///local_data/interviewiq.db"

    @validator('backend')
    def validate_backend(cls, v):
        """Restrict the backend to the supported stores"""
        v = v.lower()
        if v not in ("memory", "file", "sql"):
            raise ValueError(f"Unsupported storage backend: {v}")
        return v


class AssessmentConfig(BaseModel):
    """Interview assessment configuration"""
    question_count: int = Field(default=5, ge=1)
    question_time_limit: int = Field(default=30, ge=1)
    timer_tick_seconds: float = Field(default=1.0, gt=0)
    enable_question_timer: bool = True
    answer_match_policy: str = "exact"
    keyword_match_threshold: float = Field(default=0.6, ge=0, le=1)
    pass_threshold: int = Field(default=60, ge=0, le=100)
    timeout_answer_text: str = TIMEOUT_ANSWER_TEXT
    question_bank_path: Optional[str] = None

    @validator('answer_match_policy')
    def validate_answer_match_policy(cls, v):
        """Restrict the policy to the supported answer comparisons"""
        v = v.strip().lower()
        if v not in ANSWER_MATCH_POLICIES:
            raise ValueError(f"Unsupported answer match policy: {v}")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    use_json: bool = False
    log_file: Optional[str] = None


class AIConfig(BaseModel):
    """Generative text relay configuration"""
    api_key: Optional[str] = None
    api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    model_name: str = "gemini-pro"
    timeout: float = 30.0
    max_retries: int = 2
    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 1024


class NotificationConfig(BaseModel):
    """Email relay configuration"""
    enabled: bool = False
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    use_ssl: bool = True
    username: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None
    admin_email: Optional[str] = None
    timeout: float = 10.0


class APIConfig(BaseModel):
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 8000
    allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"])


class AppConfig(BaseModel):
    """Main application configuration"""
    environment: str = "development"
    storage: StorageConfig = Field(default_factory=StorageConfig)
    assessment: AssessmentConfig = Field(default_factory=AssessmentConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Environment variable -> (section, field)
ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "STORAGE_BACKEND": ("storage", "backend"),
    "DATA_DIR": ("storage", "data_dir"),
    "DATABASE_URL": ("storage", "database_url"),
    "QUESTION_COUNT": ("assessment", "question_count"),
    "QUESTION_TIME_LIMIT": ("assessment", "question_time_limit"),
    "ENABLE_QUESTION_TIMER": ("assessment", "enable_question_timer"),
    "ANSWER_MATCH_POLICY": ("assessment", "answer_match_policy"),
    "QUESTION_BANK_PATH": ("assessment", "question_bank_path"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_JSON": ("logging", "use_json"),
    "LOG_FILE": ("logging", "log_file"),
    "GEMINI_API_KEY": ("ai", "api_key"),
    "GEMINI_MODEL": ("ai", "model_name"),
    "EMAIL_ENABLED": ("notifications", "enabled"),
    "EMAIL_USER": ("notifications", "username"),
    "EMAIL_PASS": ("notifications", "password"),
    "ADMIN_EMAIL": ("notifications", "admin_email"),
    "SMTP_HOST": ("notifications", "smtp_host"),
    "SMTP_PORT": ("notifications", "smtp_port"),
    "HOST": ("api", "host"),
    "PORT": ("api", "port"),
}


class ConfigLoader:
    """
    Configuration loader for the application.

    Loads configuration from:
    1. Default values
    2. Config file (YAML or JSON)
    3. Environment variables (highest priority)
    """

    def __init__(self, config_path: Optional[str] = None, env_file: Optional[str] = ".env"):
        """
        Initialize the config loader.

        Args:
            config_path: Path to config file (YAML or JSON)
            env_file: Dotenv file loaded before reading the environment
        """
        if env_file:
            load_dotenv(env_file)
        self.config_path = config_path or os.environ.get("CONFIG_PATH")
        self._config: Optional[AppConfig] = None

    def load(self) -> AppConfig:
        """
        Load configuration from all sources.

        Returns:
            Loaded configuration
        """
        if self._config is not None:
            return self._config

        values: Dict[str, Any] = {}
        if self.config_path:
            values = self._load_from_file(self.config_path)

        self._apply_environment(values, os.environ)
        if "ENVIRONMENT" in os.environ:
            values["environment"] = os.environ["ENVIRONMENT"]

        self._config = AppConfig(**values)
        return self._config

    @staticmethod
    def _apply_environment(values: Dict[str, Any], environ) -> None:
        for env_name, (section, field) in ENV_OVERRIDES.items():
            if env_name in environ:
                values.setdefault(section, {})[field] = environ[env_name]

    def _load_from_file(self, path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            path: Path to config file

        Returns:
            Loaded configuration dictionary
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.warning(f"Config file not found: {file_path}")
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                if file_path.suffix.lower() in ['.yaml', '.yml']:
                    return yaml.safe_load(f) or {}
                if file_path.suffix.lower() == '.json':
                    return json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config file {file_path}: {e}")
            return {}

        logger.warning(f"Unsupported config file format: {file_path.suffix}")
        return {}


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the loaded configuration, loading it on first use.

    Returns:
        Loaded configuration
    """
    global _config
    if _config is None:
        _config = ConfigLoader().load()
    return _config


def reload_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Reload the configuration.

    Args:
        config_path: Path to config file

    Returns:
        Reloaded configuration
    """
    global _config
    _config = ConfigLoader(config_path).load()
    return _config
