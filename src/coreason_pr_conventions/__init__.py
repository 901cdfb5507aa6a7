"""
Pull request and git convention checks for CI.
"""

__version__ = "0.1.0"
