"""Test package for Virtual Parent.

Structure:
    - unit/: Individual function and class tests
    - integration/: API and client round-trip tests

Leverages pytest with pytest-asyncio and pytest-check for soft assertions.
"""
