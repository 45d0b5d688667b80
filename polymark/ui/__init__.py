"""
User interface for Polymark.
"""
from .windows import MainWindow

__all__ = ['MainWindow']
