"""
RELGRAPH API

FastAPI surface over the inference engine.
"""

from .main import app

__all__ = ['app']
