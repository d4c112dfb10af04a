"""
identity_core.session

Session revalidation package.

Responsibilities:
- Session middleware hooks (serialize/deserialize) with staleness policy.
"""

# Package marker.
