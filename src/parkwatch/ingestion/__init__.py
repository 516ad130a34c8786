"""Ingestion layer.

Decoders and normalization helpers that turn raw rig payloads into typed
values before the reducer sees them.
"""

__all__: list[str] = []
