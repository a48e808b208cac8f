"""NiceGUI interface - thin visualization layer for chat interactions.

Delivers a responsive web UI with real-time updates.

Responsibilities:
    - Chat message display with streaming support
    - Session sidebar with new, rename and delete actions
    - Voice input and read-aloud through browser speech APIs
    - Dark/light theme support

Contains no business logic. Delegates all state changes to SessionController.
Remains a pure presentation layer.
"""
