"""
Utils module for kscml
Contains diagnostics, settings and file loading helpers
"""

from .diagnostics import Diagnostics, DiagnosticsConfig
from .settings import ConversionSettings, SettingsManager
from .file_loader import read_container, load_texture, load_atlas, load_animation

__all__ = [
    'Diagnostics',
    'DiagnosticsConfig',
    'ConversionSettings',
    'SettingsManager',
    'read_container',
    'load_texture',
    'load_atlas',
    'load_animation',
]
