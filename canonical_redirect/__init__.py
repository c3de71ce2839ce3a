"""Canonical URL redirects for FastAPI and Starlette applications."""

__version__ = "0.1.0"
