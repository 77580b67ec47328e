"""Observability for shared middleware operations."""

from shared_kernel.middleware.observability.request_context_probe import (
    DefaultRequestContextProbe,
    RequestContextProbe,
)

__all__ = [
    "DefaultRequestContextProbe",
    "RequestContextProbe",
]
