"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the search core to its collaborators:
- Schedule storage (in-memory index, SQLite, CSV loaders)
- Route graphs (CSV topology, schedule-derived DFS)
- Result caching (in-memory, null)
"""
