"""Configuration models using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ereminders.config.paths import get_socket_path, get_system_timezone

DEFAULT_SUBJECT_PREFIX = "[E-Reminder] "


class EmailConfig(BaseModel):
    """Addressing for reminder emails."""

    model_config = ConfigDict(populate_by_name=True)

    to: str
    sender: str = Field(alias="from")
    subject_prefix: str = DEFAULT_SUBJECT_PREFIX


class SMTPConfig(BaseModel):
    """Configuration for the SMTP server used to deliver reminders."""

    host: str = "localhost"
    port: int = 25
    username: str | None = None
    password: SecretStr | None = None
    starttls: bool = False
    timeout: float = 30.0


class RetryConfig(BaseModel):
    """Retry policy for mail delivery.

    A send that still fails after ``max_attempts`` stops the daemon.
    Set ``max_attempts = 1`` to stop on the first failure.
    """

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=2.0, ge=0)
    max_delay: float = Field(default=60.0, ge=0)


class EremindersConfig(BaseModel):
    """Root configuration model."""

    email: EmailConfig
    smtp: SMTPConfig = Field(default_factory=SMTPConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    jobs_dir: Path | None = None
    timezone: str = Field(default_factory=get_system_timezone)
    socket_path: Path = Field(default_factory=get_socket_path)
