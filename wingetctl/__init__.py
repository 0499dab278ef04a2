"""
wingetctl — keep winget usable on a host and converge managed apps.
"""

__version__ = "0.1.0"
