"""Infrastructure Layer — database session management and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from core/ domain logic, except core/errors.py
    - All driver failures mapped to DatabaseError

Design Decisions:
    - Session manager owns pooling and rollback so services only see AsyncSession
"""
