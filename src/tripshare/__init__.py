"""
Core business logic package for Trip Share.

Companion relationships, per-item attendance, permission resolution and
trip-to-item cascades live here. Lambda handlers in src/handlers/ are thin
wrappers that call into tripshare/.
"""

__all__: list[str] = []
