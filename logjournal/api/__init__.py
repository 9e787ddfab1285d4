"""
HTTP API for document generation.
"""

from .app import create_app

__all__ = ["create_app"]
