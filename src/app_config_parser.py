"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    AlertSettings,
    AppConfig,
    AppConfigurationError,
    LoggingSettings,
    SessionSettings,
    StorageSettings,
    TimerSettings,
    UIServerSettings,
)

DEFAULT_DATABASE_FILE = "data/work_cycles.sqlite3"
DEFAULT_MARKER_FILE = "data/phase_markers.json"
_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        session=_parse_session_settings(_section(raw, "session")),
        timer=_parse_timer_settings(_section(raw, "timer")),
        alerts=_parse_alert_settings(_section(raw, "alerts")),
        storage=_parse_storage_settings(_section(raw, "storage"), base_dir=base_dir),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir),
        logging=_parse_logging_settings(_section(raw, "logging")),
        source_file=source_file,
    )


def _parse_session_settings(section: Mapping[str, Any]) -> SessionSettings:
    return SessionSettings(
        cycle_duration_minutes=_as_positive_int(
            section.get("cycle_duration_minutes", 30),
            "session.cycle_duration_minutes",
        ),
        break_duration_minutes=_as_positive_int(
            section.get("break_duration_minutes", 10),
            "session.break_duration_minutes",
        ),
        total_cycles=_as_positive_int(
            section.get("total_cycles", 3),
            "session.total_cycles",
        ),
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    poll_interval = _as_float(
        section.get("poll_interval_seconds", 0.2),
        "timer.poll_interval_seconds",
    )
    if poll_interval <= 0:
        raise AppConfigurationError("timer.poll_interval_seconds must be positive.")
    return TimerSettings(poll_interval_seconds=poll_interval)


def _parse_alert_settings(section: Mapping[str, Any]) -> AlertSettings:
    volume = _as_float(section.get("tone_volume", 0.5), "alerts.tone_volume")
    if not 0.0 <= volume <= 1.0:
        raise AppConfigurationError("alerts.tone_volume must be in [0.0, 1.0].")
    return AlertSettings(
        tone_enabled=_as_bool(section.get("tone_enabled", True), "alerts.tone_enabled"),
        tone_frequency_hz=_as_float(
            section.get("tone_frequency_hz", 440.0),
            "alerts.tone_frequency_hz",
        ),
        tone_duration_seconds=_as_float(
            section.get("tone_duration_seconds", 1.0),
            "alerts.tone_duration_seconds",
        ),
        tone_volume=volume,
        output_device=(
            _as_int(section.get("output_device"), "alerts.output_device")
            if "output_device" in section
            else None
        ),
        desktop_notifications=_as_bool(
            section.get("desktop_notifications", True),
            "alerts.desktop_notifications",
        ),
        notify_command=(
            _as_str(section.get("notify_command", "notify-send"), "alerts.notify_command")
            or "notify-send"
        ),
        browser_notifications=_as_bool(
            section.get("browser_notifications", True),
            "alerts.browser_notifications",
        ),
    )


def _parse_storage_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StorageSettings:
    database_file = _as_str(
        section.get("database_file", DEFAULT_DATABASE_FILE),
        "storage.database_file",
    )
    marker_file = _as_str(
        section.get("marker_file", DEFAULT_MARKER_FILE),
        "storage.marker_file",
    )
    if not database_file:
        raise AppConfigurationError("storage.database_file is required.")
    return StorageSettings(
        database_file=_resolve_path(base_dir, database_file),
        marker_file=_resolve_path(base_dir, marker_file),
    )


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        index_file=_resolve_path(base_dir, index_file) if index_file else "",
    )


def _parse_logging_settings(section: Mapping[str, Any]) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper() or "INFO"
    if level not in _ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LOG_LEVELS))
        raise AppConfigurationError(f"logging.level must be one of: {allowed}.")
    return LoggingSettings(level=level)


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_positive_int(value: Any, field: str) -> int:
    number = _as_int(value, field)
    if number < 1:
        raise AppConfigurationError(f"{field} must be at least 1.")
    return number


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
