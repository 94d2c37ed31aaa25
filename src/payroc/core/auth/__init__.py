"""Authorization header providers."""

from .provider import AuthProvider, AuthRequest, BearerAuthProvider, StaticAuthProvider

__all__ = [
    "AuthProvider",
    "AuthRequest",
    "BearerAuthProvider",
    "StaticAuthProvider",
]
