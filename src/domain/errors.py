"""
Domain Error

Value carried inside result.Err by every use case and service.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Error:
    """Stable machine-readable code plus a human-readable message"""

    code: str
    message: str
