"""Persistence adapters: SQLAlchemy models, database and transaction stores."""
