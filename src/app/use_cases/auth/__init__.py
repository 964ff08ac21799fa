"""
Authentication Use Cases

Federated login, session authentication and logout.
"""

from .authenticate_session_use_case import AuthenticateSessionUseCase
from .dtos import AccountResponse, LoginOutcome, LogoutResponse, VerifiedIdentity
from .handle_login_callback_use_case import HandleLoginCallbackUseCase
from .logout_use_case import LogoutUseCase

__all__ = [
    "HandleLoginCallbackUseCase",
    "AuthenticateSessionUseCase",
    "LogoutUseCase",
    "VerifiedIdentity",
    "AccountResponse",
    "LoginOutcome",
    "LogoutResponse",
]
