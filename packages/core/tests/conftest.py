"""Shared fixtures for core tests."""

from __future__ import annotations

import pytest

from shardpoint_core.correlation import set_correlation_id
from shardpoint_core.instrumentation import HookRegistry, set_hook_registry


@pytest.fixture(autouse=True)
def _isolated_context() -> None:
    """Fresh hook registry and no correlation id for every test."""
    set_hook_registry(HookRegistry())
    set_correlation_id(None)
