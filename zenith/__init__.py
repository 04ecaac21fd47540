"""
Zenith Finance - Core Package

The embedded data store behind a personal finance tracker: users,
profiles, transactions, categories, income sources and currencies,
kept consistent under edits and mirrored to durable storage.

DESIGN PRINCIPLES:
1. The in-memory snapshot is the source of truth
2. Every mutation produces a new immutable snapshot
3. Referential integrity is checked before anything is committed
4. Persistence and AI suggestions are best-effort, never fatal
5. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "Zenith Finance Team"
