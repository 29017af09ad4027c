"""
API access layer for the client dashboard.
"""

from clientdash.sdk.api import ApiService
from clientdash.sdk.errors import ApiError, ErrorKind
from clientdash.sdk.models import (
    ClientData,
    ClientPatch,
    ClientRecord,
    ForgotPasswordData,
    LoginData,
    Message,
    PasswordResetData,
    RegisterData,
    User,
)
from clientdash.sdk.session import FileTokenStore, MemoryTokenStore, SessionContext, TokenStore

__all__ = [
    "ApiService",
    "ApiError",
    "ErrorKind",
    "ClientData",
    "ClientPatch",
    "ClientRecord",
    "ForgotPasswordData",
    "LoginData",
    "Message",
    "PasswordResetData",
    "RegisterData",
    "User",
    "FileTokenStore",
    "MemoryTokenStore",
    "SessionContext",
    "TokenStore",
]
