"""Centralized logging utilities for hubcommon.

This module provides:
- Logging configuration from HubConfig
- Safe preview utilities for request/response payloads
- Secret redaction (tokens travel as query parameters on ArcGIS calls)
- Structured logging with permission-check labels
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from .config import HubConfig, LogLevel


# Patterns for detecting secrets (common patterns to redact)
SECRET_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token|key|api[_-]?key|auth[_-]?token)\s*[:=]\s*["\']?([^"\'\s&]+)',
    r'(?i)(?:bearer|basic)\s+([a-zA-Z0-9+/=._-]+)',
    r'(?i)(?:x-esri-authorization)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'[a-f0-9]{32,}',  # Long hex strings (could be hashes or keys)
]

_RESERVED_RECORD_KEYS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "label", "permission",
}


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a safe, length-bounded preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A single-line, truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    # Normalize whitespace
    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Redact secret patterns from text.

    Covers ``token=...`` query parameters, bearer / basic auth headers,
    passwords, api keys and long hex strings.

    Args:
        text: The text to redact
        replacement: String to replace secrets with (default: "[REDACTED]")

    Returns:
        Text with secrets redacted
    """
    if not isinstance(text, str):
        return text

    result = text
    for pattern in SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE | re.DOTALL)

    return result


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Create a safe log value with preview and optional redaction.

    This is the main function to use when logging urls or payloads.
    """
    preview = safe_preview(value, limit=limit)
    if redact:
        preview = redact_secrets(preview)
    return preview


class HubLogFormatter(logging.Formatter):
    """Formatter with optional JSON output and permission-check labels.

    This formatter:
    - Extracts ``label`` and ``permission`` from log records (if available)
    - Formats logs as JSON for structured logging, or plain text
    - Includes safe previews of extra fields
    - Redacts secrets automatically
    """

    def __init__(
        self,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        label = getattr(record, "label", None)
        permission = getattr(record, "permission", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if label:
            log_data["label"] = label
        if permission:
            log_data["permission"] = permission

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = safe_log_value(value, redact=self.redact_secrets)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if label:
            parts.append(f"label={label}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class HubLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds ``label`` and ``permission`` to records.

    Usage:
        logger = get_hub_logger(__name__, label="site-editor")
        logger.info("Checking access", permission="hub:site:edit")
    """

    def __init__(
        self,
        logger: logging.Logger,
        label: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.label = label

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Move label / permission kwargs into ``extra``."""
        label = kwargs.pop("label", self.label)
        permission = kwargs.pop("permission", None)

        extra = kwargs.get("extra", {})
        if label:
            extra["label"] = label
        if permission:
            extra["permission"] = permission
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[HubConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
) -> None:
    """Configure root logging from HubConfig.

    Args:
        config: HubConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        redact_secrets: Whether to redact secrets (default: True)
    """
    if config is None:
        from .config import load_hub_config_from_env
        config = load_hub_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        HubLogFormatter(
            json_format=config.log_json if json_format is None else json_format,
            redact_secrets=redact_secrets,
        )
    )
    root_logger.addHandler(console_handler)

    logging.getLogger("hubcommon").setLevel(log_level)


def get_hub_logger(name: str, label: Optional[str] = None) -> HubLoggerAdapter:
    """Get a logger adapter that tags records with a label.

    Example:
        logger = get_hub_logger(__name__, label="catalog")
        logger.info("Searching collections")
    """
    return HubLoggerAdapter(logging.getLogger(name), label=label)


__all__ = [
    "safe_preview",
    "redact_secrets",
    "safe_log_value",
    "HubLogFormatter",
    "HubLoggerAdapter",
    "setup_logging",
    "get_hub_logger",
]
