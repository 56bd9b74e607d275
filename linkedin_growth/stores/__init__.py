"""Data stores for persistence and caching.

- PostgreSQL: async engine, session factory, health check
- Redis: report caches, post-pulse lists, sync locks

Stores hold no scoring or LinkedIn logic; that lives in services.
"""
