"""Services Layer — the imperative shell around the pure core.

Invariants:
    - Services own IO (database sessions, collaborator calls); decisions come from core/
    - Each service takes its collaborators in the constructor (no global lookups)

Design Decisions:
    - One service per concern: authentication, accounts, events, credentials, attendance
"""
