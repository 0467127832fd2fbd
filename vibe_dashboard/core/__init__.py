"""
Core modules for Vibe Dashboard.

This package contains the usage record model, source merging,
period filtering, validation and summary derivation.
"""
