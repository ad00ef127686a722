"""Configuration management with Pydantic settings."""

import os
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class WorkerConfig(BaseModel):
    """Cadence and concurrency of the background workers."""
    check_interval_seconds: int = 60
    rotation_interval_seconds: int = 60 * 60 * 24
    max_concurrent_checks: int = 20
    checks_category: str = "checks"
    drain_timeout_seconds: float = 10.0

    @field_validator('check_interval_seconds', 'rotation_interval_seconds')
    @classmethod
    def interval_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('interval must be at least 1 second')
        return v

    @field_validator('max_concurrent_checks')
    @classmethod
    def max_concurrent_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('max_concurrent_checks must be at least 1')
        return v


class DatabaseConfig(BaseModel):
    """Record store configuration."""
    type: str = "sqlite"
    url: str = "sqlite+aiosqlite:///./data/uptime_worker.db"
    pool_size: int = 5
    max_overflow: int = 10
    echo: bool = False

    @field_validator('type')
    @classmethod
    def database_type_must_be_supported(cls, v):
        supported = ['sqlite', 'postgresql', 'mysql']
        if v not in supported:
            raise ValueError(f'database type must be one of {supported}')
        return v


class LogStoreConfig(BaseModel):
    """Per-check probe log configuration."""
    directory: str = ".logs"


class SmsConfig(BaseModel):
    """Twilio SMS configuration used for state-change alerts."""
    enabled: bool = False
    account_sid: str = ""
    auth_token: str = ""
    from_phone: str = ""
    country_code: str = "+1"
    api_base: str = "https://api.twilio.com"
    timeout: int = 10

    # Credentials are checked in load_config() once environment overrides apply
    @field_validator('timeout')
    @classmethod
    def timeout_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('timeout must be at least 1 second')
        return v


class RedisConfig(BaseModel):
    """Redis configuration for cross-process single-flight locks."""
    enabled: bool = False
    url: str = "redis://localhost:6379/0"
    max_connections: int = 10
    socket_timeout: int = 5
    socket_connect_timeout: int = 5
    lock_ttl_seconds: int = 300


class LoggingConfig(BaseModel):
    """Application logging configuration."""
    level: str = "INFO"
    format: str = "json"
    file: Optional[str] = "logs/uptime_worker.log"
    console: bool = True

    @field_validator('level')
    @classmethod
    def log_level_must_be_valid(cls, v):
        if isinstance(v, str):
            v = v.upper()
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v not in valid_levels:
            raise ValueError(f'log level must be one of {valid_levels}')
        return v


class PrometheusConfig(BaseModel):
    """Prometheus metrics configuration."""
    enabled: bool = False
    port: int = 9090

    @field_validator('port')
    @classmethod
    def port_must_be_valid(cls, v):
        if not (1 <= v <= 65535):
            raise ValueError('port must be between 1 and 65535')
        return v


class Config(BaseModel):
    """Main configuration class."""
    worker: WorkerConfig = Field(default_factory=WorkerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logs: LogStoreConfig = Field(default_factory=LogStoreConfig)
    sms: SmsConfig = Field(default_factory=SmsConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)


def _load_dotenv(path: str = ".env") -> None:
    """Copy KEY=VALUE pairs from a .env file into the process environment."""
    if not os.path.exists(path):
        return
    try:
        with open(path, "r") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    os.environ[key.strip()] = value.strip().strip('"').strip("'")
    except OSError as e:
        print(f"Warning: Could not load .env file: {e}")


def load_config() -> Config:
    """
    Load configuration from YAML file and environment variables.

    Returns:
        Config: Loaded configuration

    Raises:
        FileNotFoundError: If config file doesn't exist outside development
        ValueError: If config file is invalid YAML or fails validation
    """
    _load_dotenv()

    app_env = os.getenv("APP_ENV", "development")
    config_path = os.getenv("CONFIG_PATH", "config/config.yaml")

    config_data = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_path}: {e}")
    elif app_env != "development":
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        config = Config(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    database_url = os.getenv("DATABASE_URL")
    if database_url:
        config.database.url = database_url

    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        config.logs.directory = log_dir

    redis_enabled = os.getenv("REDIS_ENABLED")
    if redis_enabled is not None:
        config.redis.enabled = redis_enabled.lower() in ("true", "1", "yes", "on")

    redis_url = os.getenv("REDIS_URL")
    if redis_url:
        config.redis.url = redis_url

    # Twilio credentials normally arrive through the environment
    for env_name, attr in (
        ("TWILIO_ACCOUNT_SID", "account_sid"),
        ("TWILIO_AUTH_TOKEN", "auth_token"),
        ("TWILIO_FROM_PHONE", "from_phone"),
    ):
        value = os.getenv(env_name)
        if value:
            setattr(config.sms, attr, value)

    if config.sms.enabled and not (config.sms.account_sid and config.sms.auth_token and config.sms.from_phone):
        raise ValueError("SMS alerts are enabled but Twilio credentials are not set")

    if config.redis.enabled and not config.redis.url:
        raise ValueError("Redis is enabled but URL is not set")

    return config
