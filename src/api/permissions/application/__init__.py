"""Application layer for the permissions bounded context."""
