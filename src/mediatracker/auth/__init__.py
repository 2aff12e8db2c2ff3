"""
Authentication module for mediatracker.

Password hashing, access-token issuance and verification, and the
register/login flows behind the auth endpoints.
"""

from __future__ import annotations

from .credentials import CredentialService, credential_service

__all__ = ["CredentialService", "credential_service"]
