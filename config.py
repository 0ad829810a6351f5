"""Configuration module for the Baby Care backend services.

This module provides configuration settings using Pydantic Settings.
Environment variables can be used to override default values.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings for the Baby Care backend services.

    All settings can be overridden via environment variables.
    Example: export WEBMD_API_KEY="..."
    """

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./babycare.db"
    """Database connection URL. Default: SQLite file in current directory"""

    # API Server Configuration
    API_HOST: str = "0.0.0.0"
    """API server host address"""

    API_PORT: int = 8005
    """API server port"""

    # MCP Server Configuration
    MCP_HOST: str = "127.0.0.1"
    """MCP server host address"""

    MCP_PORT: int = 8006
    """MCP server port for SSE transport (separate from REST API)"""

    MCP_TRANSPORT: str = "sse"
    """MCP transport type: 'stdio' for local, 'sse' for network access"""

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    """Level for service loggers (DEBUG, INFO, WARNING, ...)"""

    LOG_DIR: Optional[str] = None
    """Directory for rotating log files. Unset: ./logs next to the code"""

    # Appointment Reminder Configuration
    REMINDER_LEAD_DAYS: int = 1
    """Remind about appointments on the calendar day this many days ahead (1 = tomorrow)"""

    REMINDER_TIMEZONE: str = "UTC"
    """Timezone used to compute calendar day boundaries for the reminder window"""

    NOTIFIER_WEBHOOK_URL: Optional[str] = None
    """Webhook that receives reminder notifications. Unset: reminders are only logged"""

    NOTIFIER_TIMEOUT: float = 10.0
    """Timeout in seconds for a single notification request"""

    # Advisory Provider Configuration
    PROVIDER_TIMEOUT: float = 8.0
    """Timeout in seconds for each knowledge provider search"""

    WEBMD_API_URL: str = "https://api.webmd.com/search"
    WEBMD_API_KEY: str = ""

    BABYCENTER_API_URL: str = "https://api.babycenter.com/search"
    BABYCENTER_API_KEY: str = ""

    # Background Worker Configuration
    WORKER_ENABLED: bool = True
    """Enable/disable the background reminder worker"""

    WORKER_CHECK_INTERVAL: int = 86400
    """Interval in seconds between reminder dispatch runs (default: once a day)"""

    class Config:
        """Pydantic config"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
