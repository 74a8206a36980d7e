"""Database Metadata — declarative Base shared by models, migrations and tests.

Invariants:
    - Engines and sessions are owned by infrastructure/database.py, not this package
"""
