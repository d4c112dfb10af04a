"""
identity_core.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide the users ORM model, engine/session setup, and the SQL user store.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Only `repositories.users` converts between ORM rows and `Identity` values.
