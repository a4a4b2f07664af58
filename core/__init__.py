"""
Core Module Package.

Shared infrastructure used by every other package.

Components:
- clock: Civil-time clock abstraction
- config: Environment-driven application configuration
"""

from core.clock import ClockProtocol, MockClock, SystemClock
from core.config import AppConfig


__all__ = [
    "AppConfig",
    "ClockProtocol",
    "MockClock",
    "SystemClock",
]
