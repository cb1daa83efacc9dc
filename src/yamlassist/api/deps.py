"""Dependency injection for FastAPI: AutomationEngine singleton."""

from __future__ import annotations

from yamlassist.service.engine import AutomationEngine

_engine: AutomationEngine | None = None


def init_engine(engine: AutomationEngine) -> None:
    """Set the global AutomationEngine (called at app startup)."""
    global _engine  # noqa: PLW0603
    _engine = engine


def get_engine() -> AutomationEngine:
    """FastAPI ``Depends`` provider for AutomationEngine."""
    if _engine is None:
        raise RuntimeError("AutomationEngine not initialised: call init_engine() first")
    return _engine


def reset_engine() -> None:
    """Clear the global AutomationEngine (for tests)."""
    global _engine  # noqa: PLW0603
    _engine = None
