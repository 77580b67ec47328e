"""Shared middleware for cross-cutting concerns.

This module contains value objects and probes for request-scoped caller
identity that are shared across bounded contexts.
"""
