"""
MR Travels web shell.

Server-rendered layout, admin tools page and operational endpoints for the
bike and scooter rental management system.
"""

__version__ = "1.0.0"
