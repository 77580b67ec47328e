"""Permissions bounded context.

Grants, revokes and inspects bookmark permission tuples on behalf of
authenticated callers, delegating decisions to the shared authorization engine.
"""
