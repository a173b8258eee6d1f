"""HTTP surface of the cultural profile engine."""

from .server import app, create_app

__all__ = ['app', 'create_app']
