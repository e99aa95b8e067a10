# bce/utils/__init__.py
"""Utility functions for bce."""

from bce.utils.logging import (
    configure_logging,
    get_request_id,
    set_request_id,
)

__all__ = [
    "set_request_id",
    "get_request_id",
    "configure_logging",
]
