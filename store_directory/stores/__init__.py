"""Persistence layers.

- postgres: async SQLAlchemy engine, sessions, schema bootstrap
- redis: optional cache for aggregate reports
"""
