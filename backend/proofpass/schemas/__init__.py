"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Response schemas list their fields explicitly: secrets such as admin_code never leak

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
