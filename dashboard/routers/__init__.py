"""
Read API Routers.
"""
from . import health, measurements

__all__ = ["health", "measurements"]
