"""
civisetup core - Dispatch and lifecycle.

- Event Bus: priority-ordered listener registry and dispatch
- Events: typed result carriers, one class per phase
- Lifecycle: the Setup facade and its process-wide handle
"""

__all__ = []
