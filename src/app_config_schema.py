"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class SessionSettings:
    """Defaults offered by the session preparation form, from `[session]`."""
    cycle_duration_minutes: int = 30
    break_duration_minutes: int = 10
    total_cycles: int = 3


@dataclass(frozen=True)
class TimerSettings:
    """Countdown engine tuning from `[timer]`."""
    poll_interval_seconds: float = 0.2


@dataclass(frozen=True)
class AlertSettings:
    """Completion tone and notification settings from `[alerts]`."""
    tone_enabled: bool = True
    tone_frequency_hz: float = 440.0
    tone_duration_seconds: float = 1.0
    tone_volume: float = 0.5
    output_device: Optional[int] = None
    desktop_notifications: bool = True
    notify_command: str = "notify-send"
    browser_notifications: bool = True


@dataclass(frozen=True)
class StorageSettings:
    """Database and phase-marker file locations from `[storage]`."""
    database_file: str = ""
    marker_file: str = ""


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class LoggingSettings:
    """Root log level from `[logging]`."""
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    session: SessionSettings
    timer: TimerSettings
    alerts: AlertSettings
    storage: StorageSettings
    ui_server: UIServerSettings
    logging: LoggingSettings
    source_file: str
