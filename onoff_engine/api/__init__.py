"""
API Package.

Exposes the FastAPI application receiving lifecycle event webhooks.
"""
