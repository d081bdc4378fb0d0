"""
Repository layer for data access.

Each repository wraps an AsyncSession and owns the queries for one
aggregate, keeping SQL out of services and route handlers.
"""
