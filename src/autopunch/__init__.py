"""
Scheduled attendance punch automation.
"""
__version__ = "1.0.0"
