"""State/store layer.

This package is the single source of truth for how incoming rig events are
merged into the lot snapshot.  Only the reducer decides what an event does;
the store only holds the result.
"""
