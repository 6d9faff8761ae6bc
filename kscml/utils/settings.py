"""
Settings Manager
Conversion settings and their persistence
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Union

from PyQt6.QtCore import QSettings

from .diagnostics import DiagnosticsConfig


@dataclass
class ConversionSettings:
    """Options of the build/animation to Spriter conversion"""
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    # Leading frames of each (extended) clip fed to the layer reconciler; None = all
    reconcile_frame_limit: Optional[int] = 2
    position_precision: int = 2
    scale_precision: int = 6
    angle_precision: int = 3
    pivot_precision: int = 6
    indent: str = "\t"

    def to_dict(self) -> Dict[str, object]:
        return {
            'diagnostics': self.diagnostics.to_dict(),
            'reconcile_frame_limit': self.reconcile_frame_limit,
            'position_precision': self.position_precision,
            'scale_precision': self.scale_precision,
            'angle_precision': self.angle_precision,
            'pivot_precision': self.pivot_precision,
            'indent': self.indent,
        }


class SettingsManager:
    """
    Loads and saves conversion settings

    With a path the settings live in that INI file; without one they use
    the per-user store. Diagnostics options sit in the ``diagnostics``
    group. A stored frame limit of 0 means every frame.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path else None
        self.settings = ConversionSettings()

    def _store(self, path: Union[str, Path, None]) -> QSettings:
        target = Path(path) if path else self.path
        if target is None:
            return QSettings('kscml', 'Settings')
        return QSettings(str(target), QSettings.Format.IniFormat)

    def load(self, path: Union[str, Path, None] = None) -> ConversionSettings:
        """
        Load settings

        Missing keys keep their defaults and unknown keys are ignored.

        Args:
            path: Settings file (defaults to the manager's path)

        Returns:
            The loaded settings
        """
        store = self._store(path)
        defaults = ConversionSettings()

        diagnostics = DiagnosticsConfig()
        for option in fields(DiagnosticsConfig):
            default = getattr(diagnostics, option.name)
            value = store.value(f"diagnostics/{option.name}", default, type=type(default))
            setattr(diagnostics, option.name, value)

        limit = store.value('reconcile_frame_limit', defaults.reconcile_frame_limit, type=int)
        self.settings = ConversionSettings(
            diagnostics=diagnostics,
            reconcile_frame_limit=limit or None,
            position_precision=store.value('position_precision', defaults.position_precision, type=int),
            scale_precision=store.value('scale_precision', defaults.scale_precision, type=int),
            angle_precision=store.value('angle_precision', defaults.angle_precision, type=int),
            pivot_precision=store.value('pivot_precision', defaults.pivot_precision, type=int),
            indent=store.value('indent', defaults.indent, type=str),
        )
        return self.settings

    def save(self, path: Union[str, Path, None] = None):
        """Write the current settings"""
        target = Path(path) if path else self.path
        if target is not None:
            target.parent.mkdir(parents=True, exist_ok=True)

        store = self._store(target)
        values = self.settings.to_dict()
        for key, value in values.pop('diagnostics').items():
            store.setValue(f"diagnostics/{key}", value)
        values['reconcile_frame_limit'] = values['reconcile_frame_limit'] or 0
        for key, value in values.items():
            store.setValue(key, value)

        store.sync()
        if store.status() != QSettings.Status.NoError:
            raise OSError(f"Could not write settings to {store.fileName()}")
