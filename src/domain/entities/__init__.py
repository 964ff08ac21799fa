"""
Intranet Access Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import AccountRole, InvitationStatus

# Export all entities
from .account import Account
from .invitation import Invitation
from .session import Session
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "AccountRole",
    "InvitationStatus",
    # Entities
    "Account",
    "Invitation",
    "Session",
    "AuditEvent",
]
