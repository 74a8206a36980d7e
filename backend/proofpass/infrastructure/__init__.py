"""Infrastructure Layer — database, external clients and cross-cutting concerns.

Invariants:
    - Infrastructure depends on core/ only for errors, protocols and value types
    - Every external call runs under a deadline and maps failures to core errors

Design Decisions:
    - Thin wrappers over raw clients (httpx, boto3, SQLAlchemy), one per collaborator
"""
