"""Services Layer — orchestration between the pure core and the stores.

Invariants:
    - Services depend on core protocols, never on SQLAlchemy directly
    - One service class per aggregate (CartEngine for carts)

Design Decisions:
    - Services receive their stores in __init__ so tests can swap in fakes
"""
