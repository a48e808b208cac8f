"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - sessions/: Registry storage and controller state machine
    - agent/: Completion configuration, retries and streaming
    - client/: Persistence client failure handling
    - ui/: Voice input state and speech scripts

Uses doubles for external services. Leverages pytest-check for multiple
assertions per test.
"""
