"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain cart business logic (delegate to services/cart_engine.py)

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
