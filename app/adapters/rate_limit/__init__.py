"""Rate limiting adapters.

This package provides a small abstraction layer so the API depends on a
decision interface rather than on the in-memory table that backs it.
"""
