"""HabitGrove habit tracking engine."""

from __future__ import annotations

from .config import BaseConfig, TestConfig
from .context import HabitGroveContext, create_context

__all__ = ["BaseConfig", "TestConfig", "HabitGroveContext", "create_context"]
