"""Admin use cases for system maintenance operations."""

from .sweep_stale_records_use_case import SweepStaleRecordsResponse, SweepStaleRecordsUseCase

__all__ = [
    "SweepStaleRecordsUseCase",
    "SweepStaleRecordsResponse",
]
