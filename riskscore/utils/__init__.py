"""Utility functions."""

from riskscore.utils.time import utc_now

__all__ = ["utc_now"]
