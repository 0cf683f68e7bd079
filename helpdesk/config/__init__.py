"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="helpdesk-realtime", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/helpdesk",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Realtime Chat ==========
    chat_reward_points: int = Field(
        default=5,
        description="Points awarded to staff/admin per chat message",
        ge=0
    )
    max_ticket_id_length: int = Field(
        default=64,
        description="Longest ticket id accepted on join/send",
        ge=1
    )
    outbox_max_events: int = Field(
        default=1000,
        description="Events queued per connection before a stalled client is dropped",
        ge=1
    )

    # ========== SLA Monitor ==========
    sla_scan_interval_seconds: int = Field(
        default=3600,
        description="Seconds between SLA breach scans (0 disables the scheduler)",
        ge=0
    )

    # ========== SMTP ==========
    smtp_host: Optional[str] = Field(default=None, description="SMTP server host")
    smtp_port: int = Field(default=587, description="SMTP server port", ge=1, le=65535)
    smtp_user: Optional[str] = Field(default=None, description="SMTP login user")
    smtp_password: Optional[str] = Field(default=None, description="SMTP login password")
    smtp_sender: str = Field(
        default="helpdesk@example.com",
        description="From address for outgoing mail"
    )
    smtp_starttls: bool = Field(default=True, description="Upgrade SMTP connection with STARTTLS")
    smtp_timeout_seconds: float = Field(default=10.0, description="SMTP socket timeout", gt=0)
    helpdesk_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL used for ticket links in emails"
    )

    # ========== Heartbeat ==========
    heartbeat_url: Optional[str] = Field(
        default=None,
        description="Uptime monitor URL pinged periodically (disabled when unset)"
    )
    heartbeat_interval_seconds: int = Field(
        default=60,
        description="Seconds between heartbeat pings",
        ge=1
    )
    heartbeat_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for heartbeat requests",
        ge=0.1,
        le=30
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "testing", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class TicketStatus(str):
    """Ticket lifecycle statuses."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    WAITING_USER = "waiting_user"
    CLOSED = "closed"


class UserRole(str):
    """Roles a chat participant can speak as."""
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"


# ========== Lists for validation ==========

VALID_STATUSES = [
    TicketStatus.OPEN, TicketStatus.IN_PROGRESS,
    TicketStatus.WAITING_USER, TicketStatus.CLOSED
]
VALID_ROLES = [UserRole.CUSTOMER, UserRole.STAFF, UserRole.ADMIN]
REWARDED_ROLES = frozenset({UserRole.STAFF, UserRole.ADMIN})
