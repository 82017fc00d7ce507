"""
Version module.

Kept as a plain module so editable and source checkouts import cleanly.
"""

__version__ = "0.1.0"
