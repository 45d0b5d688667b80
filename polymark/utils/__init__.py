"""
Utility modules for Polymark.
"""
from .logging_config import LoggingConfig

__all__ = ['LoggingConfig']
