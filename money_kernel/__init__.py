"""
Money Tracker Kernel

Persistence, read-only selectors and record services for a personal /
small-business money tracker:
- Derived balances (never stored)
- Single-writer store with atomic session scopes
- Typed errors with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
