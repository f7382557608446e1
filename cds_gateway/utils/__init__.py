"""Utility functions."""

from cds_gateway.utils.time import format_datetime, utc_now

__all__ = ["utc_now", "format_datetime"]
