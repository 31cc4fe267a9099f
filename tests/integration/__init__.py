"""
Integration tests for FanHub.

These tests run the client layer (session, directory cache, follow-state
registry and view binders) against the reference backend in-process through
httpx.ASGITransport.

Test files:
- test_main.py: service liveness endpoints
- test_happy_path.py: sign up, browse, follow and unfollow journeys

The reference backend's in-memory store is reset around every test.
"""

__all__ = []
