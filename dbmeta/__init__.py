"""Structured database metadata readers for information_schema, PostgreSQL, MySQL and Oracle."""

__version__ = "0.1.0"