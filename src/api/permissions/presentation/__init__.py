"""Permissions presentation layer."""

from permissions.presentation.routes import router

__all__ = ["router"]
