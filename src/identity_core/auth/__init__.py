"""
identity_core.auth

Credential engine package.

Responsibilities:
- Password hashing/verification and salt generation.
- Password policy checks.
- FastAPI dependencies resolving the session identity and enforcing admin access.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# `credentials` and `password_policy` are framework-free; only `deps` imports FastAPI.
