"""
Shared request helpers for route modules.
"""

from fastapi import Request

from muaythai.core.config import Settings


def public_base_url(request: Request, settings: Settings) -> str:
    """Origin used for links handed back to browsers and gateways."""
    if settings.PUBLIC_BASE_URL:
        return settings.PUBLIC_BASE_URL.rstrip("/")
    return str(request.base_url).rstrip("/")
