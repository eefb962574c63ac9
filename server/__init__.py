"""Lokaler HTTP-Server (FastAPI) für das Studio-Plugin."""

from .app import CompanionContext, create_app

__all__ = ["CompanionContext", "create_app"]
