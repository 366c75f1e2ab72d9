"""
screenflow - AI screen-set generation with deterministic fallback,
dual-store persistence and throttled board export.
"""

__version__ = "0.1.0"
