"""
Polymark: line and polygon annotations over PDF pages.
"""

__version__ = "0.3.0"
