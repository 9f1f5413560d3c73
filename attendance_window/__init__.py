"""
Attendance window - decide which calendar days a scheduled shift is active on.
"""

__version__ = "1.0.0"
