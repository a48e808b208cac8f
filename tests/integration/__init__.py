"""Integration tests for components working together as a system.

No mocks for the persistence layer - tests real HTTP round trips.

Coverage:
    - Chat persistence endpoints with real HTTP requests
    - PersistenceClient against the in-process API
    - Session controller reload through the API

Uses an in-memory SQLite store per test. No external services required.
"""
