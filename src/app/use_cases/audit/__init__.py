"""
Audit Use Cases
"""

from .get_account_audit_events_use_case import GetAccountAuditEventsUseCase

__all__ = ["GetAccountAuditEventsUseCase"]
