"""
Database connection layer.
"""

from .connection import ConnectionManager, ConnectionStatus

__all__ = [
    "ConnectionManager",
    "ConnectionStatus",
]
