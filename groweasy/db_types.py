"""Database-agnostic type definitions for SQLAlchemy models.

These work with both PostgreSQL (production) and SQLite (tests).
"""
from sqlalchemy import JSON, Numeric, Uuid

# JSONB is PostgreSQL-specific, JSON works with both
JSONType = JSON

# Native UUID on PostgreSQL, CHAR(32) elsewhere
UUIDType = Uuid

# All money columns
Money = Numeric(12, 2)
