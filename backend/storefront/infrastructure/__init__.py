"""Infrastructure Layer — persistence, auth tokens and cross-cutting concerns.

Invariants:
    - Infrastructure implements core/ protocols; core never imports from here
    - All SQLAlchemy failures mapped to core/errors.DatabaseError

Design Decisions:
    - Thin adapters that return core records, not ORM rows
"""
