"""
identity_core.api.routers

HTTP routers (health, auth, users, dev accounts).
"""
