"""
Account and subscription lifecycle console
"""

__version__ = "1.0.0"
