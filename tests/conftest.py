"""Shared fixtures: diagnostics that record instead of logging."""

from __future__ import annotations

from typing import List, Tuple

import pytest

from kscml.utils.diagnostics import Diagnostics, DiagnosticsConfig


@pytest.fixture()
def recorded() -> List[Tuple[str, str, str]]:
    return []


@pytest.fixture()
def diagnostics(recorded) -> Diagnostics:
    def sink(category: str, message: str, severity: str) -> None:
        recorded.append((category, message, severity))

    return Diagnostics(DiagnosticsConfig(minimum_severity="DEBUG", log_layer_events=True), sink=sink)
