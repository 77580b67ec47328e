"""Shared Kernel module.

Holds the bookmark authorization model and decision engine, the caller's
request context and the observation context attached to probe events.
Bounded contexts depend on these components; the kernel depends on none of
them.
"""
