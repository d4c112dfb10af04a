"""
identity_core.identity

Identity record package.

Responsibilities:
- Typed identity model and derived properties (full name, superuser, admin).
- Public projection for untrusted consumers.
- User store contract and its error type.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing here touches the database directly; see `identity_core.db` for the SQL store.
