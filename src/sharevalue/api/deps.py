"""Dependency injection for FastAPI."""

from sharevalue.app_context import AppContext, get_app_context


def get_context() -> AppContext:
    """Provide the engine context of this process."""
    return get_app_context()
