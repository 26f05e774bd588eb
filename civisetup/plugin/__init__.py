"""
civisetup plugin system - Discovery and loading of setup plugins.

This module handles:
- Plugin file discovery and ordering
- Caller overrides of the plugin set
- Loading plugins so they can register listeners
"""

__all__ = []
