"""
User Management Use Case DTOs (Data Transfer Objects)
"""

from typing import List, Optional

from pydantic import BaseModel

from src.app.use_cases.auth.dtos import AccountResponse


class AccountListResponse(BaseModel):
    """Response for list accounts use case"""

    items: List[AccountResponse]
    total: int
    page_number: int
    page_size: int


class EmailAvailabilityResponse(BaseModel):
    """Response for the e-mail availability check"""

    email: str
    available: bool
    reason: Optional[str] = None  # error code explaining why not
