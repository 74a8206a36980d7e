"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic given their inputs (clocks are injected)

Design Decisions:
    - Functional core separated from imperative shell
    - Collaborator contracts declared here as Protocols, implemented in infrastructure/
"""
