"""
Role subsystem.

Components:
- role.py: Role container (one task tree per role) and its JSON boundary
- role_store.py: SQLite-backed storage of roles
"""
