"""Middleware package."""

from standuphub.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
