"""
Data Retention Package.

Trailing-window retention for the measurement store.
"""

from .manager import RetentionManager, create_retention_manager
from .models import DEFAULT_RETENTION_DAYS, RetentionDuration


__all__ = [
    "DEFAULT_RETENTION_DAYS",
    "RetentionDuration",
    "RetentionManager",
    "create_retention_manager",
]
