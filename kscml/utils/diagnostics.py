"""
Diagnostics
Severity/category filtered log events passed explicitly to every reader
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Callable, Deque, Dict, List, Optional

DiagnosticsSink = Callable[[str, str, str], None]


@dataclass
class DiagnosticsConfig:
    """User-configurable toggles for load/convert diagnostics."""

    enabled: bool = True
    minimum_severity: str = "WARNING"
    log_texture_events: bool = True
    log_atlas_events: bool = True
    log_animation_events: bool = True
    log_layer_events: bool = False
    log_emit_events: bool = True
    max_entries: int = 2000

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "DiagnosticsConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def logging_sink(category: str, message: str, severity: str) -> None:
    """Forward an event to the standard logging package."""
    level = Diagnostics.LOGGING_LEVELS.get(severity, logging.INFO)
    logging.getLogger(f"kscml.{category}").log(level, message)


class Diagnostics:
    """Collects diagnostics events and forwards them to a sink."""

    SEVERITY_ORDER = {
        "DEBUG": 0,
        "INFO": 1,
        "SUCCESS": 1,
        "WARNING": 2,
        "ERROR": 3,
    }

    LOGGING_LEVELS = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "SUCCESS": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
    }

    CATEGORY_FLAGS = {
        "texture": "log_texture_events",
        "atlas": "log_atlas_events",
        "animation": "log_animation_events",
        "layers": "log_layer_events",
        "emit": "log_emit_events",
        "general": None,
    }

    def __init__(self, config: Optional[DiagnosticsConfig] = None,
                 sink: Optional[DiagnosticsSink] = logging_sink):
        self.config = config or DiagnosticsConfig()
        self.sink = sink
        self.events: Deque[Dict[str, str]] = deque()

    # ------------------------------------------------------------------ #
    # Logging helpers
    # ------------------------------------------------------------------ #
    def debug(self, category: str, message: str):
        self.log(category, message, "DEBUG")

    def info(self, category: str, message: str):
        self.log(category, message, "INFO")

    def warning(self, category: str, message: str):
        self.log(category, message, "WARNING")

    def error(self, category: str, message: str):
        self.log(category, message, "ERROR")

    def is_enabled_for(self, category: str, severity: str) -> bool:
        cfg = self.config
        if not cfg.enabled:
            return False
        flag_name = self.CATEGORY_FLAGS.get(category)
        if flag_name and not getattr(cfg, flag_name, False):
            return False
        return self.SEVERITY_ORDER.get(severity, 0) >= self.SEVERITY_ORDER.get(cfg.minimum_severity, 0)

    def log(self, category: str, message: str, severity: str = "INFO"):
        """
        Record an event if the configuration lets it through

        Args:
            category: Event category (texture, atlas, animation, layers, emit, general)
            message: Message text
            severity: DEBUG, INFO, SUCCESS, WARNING or ERROR
        """
        if not self.is_enabled_for(category, severity):
            return

        self.events.append({
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "category": category,
            "severity": severity,
            "message": message,
        })
        while len(self.events) > self.config.max_entries:
            self.events.popleft()

        if self.sink:
            self.sink(category, message, severity)

    def messages(self, severity: Optional[str] = None) -> List[str]:
        """Return recorded messages, optionally limited to one severity."""
        return [
            event["message"] for event in self.events
            if severity is None or event["severity"] == severity
        ]

    def clear(self):
        self.events.clear()
