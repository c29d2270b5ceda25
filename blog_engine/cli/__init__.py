"""
Command-line tooling for blog_engine.
"""

from .main import cli

__all__ = ["cli"]
